"""Password hashing, session tokens and the signup/login flows."""
