"""QingLong open API paths."""

LOGIN = "/open/auth/token"
ENV = "/open/envs"
