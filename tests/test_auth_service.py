import unittest

from auth.exceptions import AuthException, ErrorKind
from auth.security import decode_access_token, verify_password
from auth.services.admin_service import AdminService
from auth.services.auth_service import AuthService
from auth.services.otp_service import OtpService
from auth.services.session_service import SessionService
from auth.stores.memory_store import MemoryUserStore, MemoryVerificationStore
from tests.support import FakeClock, RecordingSmsGateway, use_fast_hashing

CODE = "123456"


class AuthServiceTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        use_fast_hashing(self)
        self.clock = FakeClock()
        self.users = MemoryUserStore()
        self.verifications = MemoryVerificationStore()
        self.sms = RecordingSmsGateway()
        self.otp = OtpService(
            self.verifications,
            self.sms,
            expiry_seconds=300,
            max_attempts=3,
            clock=self.clock,
            code_factory=lambda: CODE,
        )
        self.auth = AuthService(self.users, self.otp, SessionService(self.users))
        self.admin_service = AdminService(self.users)

    async def assert_auth_error(self, awaitable, kind=None, status_code=None, message=None):
        with self.assertRaises(AuthException) as ctx:
            await awaitable
        if kind is not None:
            self.assertEqual(ctx.exception.kind, kind)
        if status_code is not None:
            self.assertEqual(ctx.exception.status_code, status_code)
        if message is not None:
            self.assertEqual(ctx.exception.message, message)
        return ctx.exception

    async def register(self, contact_number="09171234567", password="password123", **overrides):
        details = {
            "first_name": "Juan",
            "last_name": "Dela Cruz",
            "contact_number": contact_number,
            "password": password,
            "barangay": "Tayhi",
            **overrides,
        }
        await self.auth.initiate_registration(**details)
        return await self.auth.complete_registration(contact_number, CODE)


class TestRegistration(AuthServiceTestCase):
    async def test_register_creates_verified_user_with_tokens(self):
        result = await self.register("09171234567")

        user = result["user"]
        self.assertEqual(user["contact_number"], "09171234567")
        self.assertTrue(user["is_verified"])
        self.assertTrue(user["is_active"])
        self.assertEqual(user["role"], "citizen")
        self.assertEqual(user["barangay"], "tayhi")
        self.assertTrue(verify_password("password123", user["hashed_password"]))
        self.assertEqual(decode_access_token(result["tokens"].access_token)["id"], user["id"])
        self.assertTrue(result["tokens"].refresh_token)

    async def test_international_number_is_stored_in_local_form(self):
        await self.auth.initiate_registration("Juan", "Dela Cruz", "+639171234567", "password123", "tayhi")
        result = await self.auth.complete_registration("09171234567", CODE)

        self.assertEqual(result["user"]["contact_number"], "09171234567")

    async def test_pending_record_removed_after_registration(self):
        await self.register()
        self.assertEqual(await self.otp.get_status("09171234567"), {"exists": False})

    async def test_sms_goes_to_normalized_number(self):
        dispatch = await self.auth.initiate_registration(
            "Juan", "Dela Cruz", "+639171234567", "password123", "tayhi"
        )

        self.assertEqual(self.sms.sent[0][0], "09171234567")
        self.assertEqual(dispatch.masked_number, "+639*****4567")

    async def test_already_registered_number_rejected_up_front(self):
        await self.register()

        await self.assert_auth_error(
            self.auth.initiate_registration("Maria", "Santos", "+639171234567", "password123", "tayhi"),
            kind=ErrorKind.ALREADY_REGISTERED,
            status_code=400,
        )
        self.assertEqual(len(self.sms.sent), 1)

    async def test_duplicate_at_finalize_time(self):
        await self.auth.initiate_registration("Juan", "Dela Cruz", "09171234567", "password123", "tayhi")
        await self.users.create_user(
            {
                "first_name": "Other",
                "last_name": "Person",
                "contact_number": "09171234567",
                "hashed_password": "x",
                "barangay": "tayhi",
            }
        )

        await self.assert_auth_error(
            self.auth.complete_registration("09171234567", CODE),
            kind=ErrorKind.ALREADY_REGISTERED,
        )
        self.assertEqual(await self.otp.get_status("09171234567"), {"exists": False})

    async def test_invalid_barangay(self):
        await self.assert_auth_error(
            self.auth.initiate_registration("Juan", "Dela Cruz", "09171234567", "password123", "atlantis"),
            kind=ErrorKind.VALIDATION_ERROR,
        )
        self.assertEqual(self.sms.sent, [])

    async def test_invalid_phone(self):
        await self.assert_auth_error(
            self.auth.initiate_registration("Juan", "Dela Cruz", "12345", "password123", "tayhi"),
            kind=ErrorKind.VALIDATION_ERROR,
        )

    async def test_wrong_codes_block_registration(self):
        await self.auth.initiate_registration("Juan", "Dela Cruz", "09171234567", "password123", "tayhi")

        for _ in range(2):
            await self.assert_auth_error(
                self.auth.complete_registration("09171234567", "000000"), kind=ErrorKind.INVALID_CODE
            )
        await self.assert_auth_error(
            self.auth.complete_registration("09171234567", "000000"), kind=ErrorKind.ATTEMPTS_EXCEEDED
        )
        await self.assert_auth_error(
            self.auth.complete_registration("09171234567", CODE), kind=ErrorKind.NOT_FOUND_OR_EXPIRED
        )
        self.assertIsNone(await self.users.get_by_contact_number("09171234567"))

    async def test_expired_code_blocks_registration(self):
        await self.auth.initiate_registration("Juan", "Dela Cruz", "09171234567", "password123", "tayhi")
        self.clock.advance(301)

        await self.assert_auth_error(
            self.auth.complete_registration("09171234567", CODE), kind=ErrorKind.EXPIRED
        )

    async def test_resend_registration_otp(self):
        await self.auth.initiate_registration("Juan", "Dela Cruz", "09171234567", "password123", "tayhi")

        dispatch = await self.auth.resend_registration_otp("+639171234567")

        self.assertEqual(dispatch.expires_in, 300)
        self.assertEqual(len(self.sms.sent), 2)


class TestLogin(AuthServiceTestCase):
    async def test_login_success_updates_last_login(self):
        registered = (await self.register())["user"]
        self.clock.advance(10)

        result = await self.auth.login("+639171234567", "password123")

        self.assertEqual(result["user"]["id"], registered["id"])
        self.assertGreaterEqual(result["user"]["last_login"], registered["last_login"])
        self.assertTrue(result["tokens"].access_token)

    async def test_wrong_password(self):
        await self.register()
        await self.assert_auth_error(
            self.auth.login("09171234567", "wrong-password"),
            kind=ErrorKind.UNAUTHORIZED,
            status_code=401,
            message="Invalid credentials",
        )

    async def test_unknown_number(self):
        await self.assert_auth_error(
            self.auth.login("09999999999", "password123"),
            status_code=401,
            message="Invalid credentials",
        )

    async def test_deactivated_user_cannot_login(self):
        user = (await self.register())["user"]
        await self.auth.deactivate(user["id"])

        await self.assert_auth_error(
            self.auth.login("09171234567", "password123"),
            status_code=401,
            message="Your account has been deactivated. Please contact support.",
        )

    async def test_deactivated_user_with_wrong_password(self):
        user = (await self.register())["user"]
        await self.auth.deactivate(user["id"])

        await self.assert_auth_error(
            self.auth.login("09171234567", "not-the-password"),
            status_code=401,
            message="Invalid credentials",
        )

    async def test_refresh(self):
        result = await self.register()

        refreshed = await self.auth.refresh(result["tokens"].refresh_token)

        self.assertEqual(decode_access_token(refreshed["token"])["id"], result["user"]["id"])
        self.assertEqual(refreshed["user"]["id"], result["user"]["id"])


class TestAccount(AuthServiceTestCase):
    async def test_get_user_from_access(self):
        result = await self.register()

        user = await self.auth.get_user_from_access(result["tokens"].access_token)

        self.assertEqual(user["contact_number"], "09171234567")

    async def test_get_user_from_access_rejects_deactivated(self):
        result = await self.register()
        await self.auth.deactivate(result["user"]["id"])

        await self.assert_auth_error(
            self.auth.get_user_from_access(result["tokens"].access_token), status_code=401
        )

    async def test_update_profile(self):
        user = (await self.register())["user"]

        updated = await self.auth.update_profile(
            user["id"], first_name="Pedro", barangay="San Isidro", bio="Hello"
        )

        self.assertEqual(updated["first_name"], "Pedro")
        self.assertEqual(updated["last_name"], "Dela Cruz")
        self.assertEqual(updated["barangay"], "san isidro")
        self.assertEqual(updated["profile"], {"bio": "Hello"})

        updated = await self.auth.update_profile(user["id"], address="Purok 1")
        self.assertEqual(updated["profile"], {"bio": "Hello", "address": "Purok 1"})

    async def test_update_profile_invalid_barangay(self):
        user = (await self.register())["user"]
        await self.assert_auth_error(
            self.auth.update_profile(user["id"], barangay="atlantis"), kind=ErrorKind.VALIDATION_ERROR
        )

    async def test_change_password(self):
        user = (await self.register())["user"]

        await self.auth.change_password(user["id"], "password123", "new-password")

        await self.auth.login("09171234567", "new-password")
        await self.assert_auth_error(self.auth.login("09171234567", "password123"), status_code=401)

    async def test_change_password_wrong_current(self):
        user = (await self.register())["user"]
        await self.assert_auth_error(
            self.auth.change_password(user["id"], "not-it", "new-password"),
            status_code=400,
            message="Current password is incorrect",
        )

    async def test_deactivate_unknown_user(self):
        await self.assert_auth_error(self.auth.deactivate(999), status_code=404)


class TestAdminService(AuthServiceTestCase):
    async def asyncSetUp(self):
        self.admin = await self.users.create_user(
            {
                "first_name": "Admin",
                "last_name": "User",
                "contact_number": "09000000000",
                "hashed_password": "x",
                "barangay": "tayhi",
                "role": "admin",
                "is_verified": True,
            }
        )

    async def test_create_user_with_temporary_password(self):
        user, temporary = await self.admin_service.create_user(
            self.admin,
            first_name="Maria",
            last_name="Santos",
            contact_number="+639181234567",
            barangay="Oson",
        )

        self.assertTrue(temporary.startswith("maria"))
        self.assertEqual(len(temporary), len("maria") + 4)
        self.assertTrue(user["is_verified"])
        self.assertEqual(user["contact_number"], "09181234567")
        await self.auth.login("09181234567", temporary)

    async def test_create_user_with_given_password(self):
        _, temporary = await self.admin_service.create_user(
            self.admin,
            first_name="Maria",
            last_name="Santos",
            contact_number="09181234567",
            barangay="oson",
            role="admin",
            password="chosen-password",
        )

        self.assertIsNone(temporary)
        result = await self.auth.login("09181234567", "chosen-password")
        self.assertEqual(result["user"]["role"], "admin")

    async def test_create_duplicate(self):
        await self.assert_auth_error(
            self.admin_service.create_user(
                self.admin,
                first_name="Again",
                last_name="Admin",
                contact_number="09000000000",
                barangay="tayhi",
            ),
            kind=ErrorKind.ALREADY_REGISTERED,
        )

    async def test_create_rejects_unknown_role(self):
        await self.assert_auth_error(
            self.admin_service.create_user(
                self.admin,
                first_name="Maria",
                last_name="Santos",
                contact_number="09181234567",
                barangay="oson",
                role="superuser",
            ),
            kind=ErrorKind.VALIDATION_ERROR,
        )

    async def test_toggle_active(self):
        user = (await self.register())["user"]

        self.assertFalse(await self.admin_service.toggle_active(self.admin, user["id"]))
        self.assertTrue(await self.admin_service.toggle_active(self.admin, user["id"]))

    async def test_cannot_toggle_self(self):
        await self.assert_auth_error(
            self.admin_service.toggle_active(self.admin, self.admin["id"]), status_code=400
        )

    async def test_reset_password(self):
        user = (await self.register())["user"]

        temporary = await self.admin_service.reset_password(self.admin, user["id"])

        self.assertTrue(temporary.startswith("juan"))
        await self.auth.login("09171234567", temporary)
        self.assertIsNone(
            await self.admin_service.reset_password(self.admin, user["id"], "another-password")
        )
        await self.auth.login("09171234567", "another-password")

    async def test_delete_user(self):
        user = (await self.register())["user"]

        await self.admin_service.delete_user(self.admin, user["id"])

        await self.assert_auth_error(self.admin_service.get_user(user["id"]), status_code=404)
        # The number can register again.
        await self.register()

    async def test_cannot_delete_self(self):
        await self.assert_auth_error(
            self.admin_service.delete_user(self.admin, self.admin["id"]), status_code=400
        )

    async def test_get_unknown_user(self):
        await self.assert_auth_error(
            self.admin_service.get_user(12345), kind=ErrorKind.NOT_FOUND, status_code=404
        )


    async def test_list_users_paginates(self):
        await self.register()
        await self.register("09181234567", first_name="Maria", last_name="Santos", barangay="Oson")

        result = await self.admin_service.list_users(page=1, limit=2)

        self.assertEqual([user["first_name"] for user in result["users"]], ["Maria", "Juan"])
        self.assertEqual(result["pagination"], {"current": 1, "pages": 2, "total": 3, "limit": 2})

    async def test_list_users_filters(self):
        await self.register()
        maria = (await self.register("09181234567", first_name="Maria", barangay="Oson"))["user"]
        await self.admin_service.toggle_active(self.admin, maria["id"])

        active_citizens = await self.admin_service.list_users(role="citizen", is_active=True)
        in_oson = await self.admin_service.list_users(barangay="OSON")
        searched = await self.admin_service.list_users(search="MARIA")

        self.assertEqual([user["first_name"] for user in active_citizens["users"]], ["Juan"])
        self.assertEqual([user["id"] for user in in_oson["users"]], [maria["id"]])
        self.assertEqual([user["id"] for user in searched["users"]], [maria["id"]])

    async def test_list_users_sorting(self):
        await self.register()

        by_snake = await self.admin_service.list_users(sort_by="first_name", sort_order="asc")
        by_camel = await self.admin_service.list_users(sort_by="firstName", sort_order="asc")

        self.assertEqual([user["first_name"] for user in by_snake["users"]], ["Admin", "Juan"])
        self.assertEqual(by_camel["users"], by_snake["users"])

    async def test_list_users_rejects_bad_arguments(self):
        await self.assert_auth_error(
            self.admin_service.list_users(sort_by="hashed_password"),
            kind=ErrorKind.VALIDATION_ERROR,
        )
        await self.assert_auth_error(
            self.admin_service.list_users(sort_order="up"), kind=ErrorKind.VALIDATION_ERROR
        )
        await self.assert_auth_error(
            self.admin_service.list_users(page=0), kind=ErrorKind.VALIDATION_ERROR
        )

    async def test_list_users_empty_page(self):
        result = await self.admin_service.list_users(page=5)

        self.assertEqual(result["users"], [])
        self.assertEqual(result["pagination"]["total"], 1)
        self.assertEqual(result["pagination"]["pages"], 1)

    async def test_update_user(self):
        user = (await self.register())["user"]

        updated = await self.admin_service.update_user(
            self.admin,
            user["id"],
            {
                "first_name": " Pedro ",
                "barangay": "OSON",
                "role": "admin",
                "is_verified": False,
                "profile": {"address": "Purok 1"},
            },
        )

        self.assertEqual(updated["first_name"], "Pedro")
        self.assertEqual(updated["last_name"], "Dela Cruz")
        self.assertEqual(updated["barangay"], "oson")
        self.assertEqual(updated["role"], "admin")
        self.assertFalse(updated["is_verified"])
        self.assertEqual(updated["profile"], {"address": "Purok 1"})

    async def test_update_user_rejects_invalid_values(self):
        user = (await self.register())["user"]

        await self.assert_auth_error(
            self.admin_service.update_user(self.admin, user["id"], {"role": "mayor"}),
            kind=ErrorKind.VALIDATION_ERROR,
        )
        await self.assert_auth_error(
            self.admin_service.update_user(self.admin, user["id"], {"barangay": "atlantis"}),
            kind=ErrorKind.VALIDATION_ERROR,
        )

    async def test_update_unknown_user(self):
        await self.assert_auth_error(
            self.admin_service.update_user(self.admin, 12345, {"first_name": "Pedro"}),
            kind=ErrorKind.NOT_FOUND,
        )

    async def test_update_self(self):
        await self.assert_auth_error(
            self.admin_service.update_user(self.admin, self.admin["id"], {"is_active": False}),
            message="You cannot deactivate your own account",
        )
        await self.assert_auth_error(
            self.admin_service.update_user(self.admin, self.admin["id"], {"role": "citizen"}),
            message="You cannot change your own role",
        )
        updated = await self.admin_service.update_user(
            self.admin, self.admin["id"], {"last_name": "Chief", "role": "admin"}
        )
        self.assertEqual(updated["last_name"], "Chief")


if __name__ == "__main__":
    unittest.main()
