import unittest

from textile_pos.config import Settings
from textile_pos.core.shop_login import check_credentials, hash_password, login_required


def shop_settings(**values):
    return Settings(_env_file=None, **values)


class ShopLoginTest(unittest.TestCase):
    def test_login_not_required_without_credentials(self):
        self.assertFalse(login_required(shop_settings()))
        self.assertFalse(login_required(shop_settings(SHOP_LOGIN_USERNAME="counter")))
        self.assertFalse(check_credentials(shop_settings(), "counter", "anything"))

    def test_plain_password(self):
        settings = shop_settings(SHOP_LOGIN_USERNAME="Counter", SHOP_LOGIN_PASSWORD="s3cret")
        self.assertTrue(login_required(settings))
        self.assertTrue(check_credentials(settings, " counter ", "s3cret"))
        self.assertFalse(check_credentials(settings, "counter", "S3CRET"))
        self.assertFalse(check_credentials(settings, "owner", "s3cret"))

    def test_hashed_password_wins_over_plain(self):
        digest = hash_password("till-2026", "pepper", 1000)
        settings = shop_settings(
            SHOP_LOGIN_USERNAME="counter",
            SHOP_LOGIN_PASSWORD="old",
            SHOP_LOGIN_PASSWORD_HASH=digest,
            SHOP_LOGIN_PASSWORD_SALT="pepper",
            SHOP_LOGIN_PBKDF2_ROUNDS=1000,
        )
        self.assertTrue(check_credentials(settings, "counter", "till-2026"))
        self.assertFalse(check_credentials(settings, "counter", "old"))

    def test_hash_without_salt_is_a_configuration_error(self):
        settings = shop_settings(SHOP_LOGIN_USERNAME="counter", SHOP_LOGIN_PASSWORD_HASH="abc")
        with self.assertRaises(ValueError):
            check_credentials(settings, "counter", "x")


if __name__ == "__main__":
    unittest.main()
