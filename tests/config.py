"""Test-specific configuration for fellowship server tests"""

test_config = {
    "database_url": "sqlite://",
    "jwt_secret": "test-secret-key-with-at-least-32-characters",
    "frontend_url": "https://fellowship.example.org",
    "admin_user_id": "admin-user-id",
    "log_level": "INFO",
}
