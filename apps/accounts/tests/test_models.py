from django.contrib.auth import get_user_model
from django.db.utils import IntegrityError
from django.test import TestCase

User = get_user_model()


class UserModelTest(TestCase):
    """Test cases for User model."""

    def setUp(self):
        self.user_data = {
            "username": "testuser",
            "email": "Test@Example.com",
            "password": "testpass123",
            "first_name": "Test",
            "last_name": "User",
        }

    def test_create_user(self):
        user = User.objects.create_user(**self.user_data)

        self.assertEqual(user.username, "testuser")
        self.assertTrue(user.check_password("testpass123"))
        self.assertEqual(user.role, User.Role.STUDENT)
        self.assertFalse(user.is_admin)

    def test_email_is_lowercased(self):
        user = User.objects.create_user(**self.user_data)
        self.assertEqual(user.email, "test@example.com")

    def test_email_must_be_unique(self):
        User.objects.create_user(**self.user_data)
        with self.assertRaises(IntegrityError):
            User.objects.create_user(
                username="other", email="test@example.com", password="testpass123"
            )

    def test_admin_role_and_superuser_are_admins(self):
        admin = User.objects.create_user(
            username="clubadmin",
            email="admin@example.com",
            password="testpass123",
            role=User.Role.ADMIN,
        )
        superuser = User.objects.create_superuser(
            username="root", email="root@example.com", password="testpass123"
        )

        self.assertTrue(admin.is_admin)
        self.assertTrue(superuser.is_admin)

    def test_full_name_falls_back_to_username(self):
        user = User.objects.create_user(
            username="noname", email="noname@example.com", password="testpass123"
        )
        self.assertEqual(user.get_full_name(), "noname")

        named = User.objects.create_user(**self.user_data)
        self.assertEqual(named.get_full_name(), "Test User")
