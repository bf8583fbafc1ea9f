"""otpgate - email OTP verified registration and bearer-token authentication."""

__version__ = "0.1.0"
