"""Foundation - errors, configuration and test doubles shared by the streaming core."""
