"""
utils/constants.py

Purpose: Centralized static content

- All client-facing messages
- Email template keys and token purposes
- Reusable constants

(Prevents hardcoding across the codebase)
"""

# ============================================================
# EMAIL TOKEN PURPOSES
# ============================================================

PURPOSE_VERIFY = "verify"
PURPOSE_RESET = "reset"

REFRESH_TOKEN_TYPE = "refresh"

# ============================================================
# EMAIL TEMPLATE KEYS
# ============================================================

TEMPLATE_VERIFY_EMAIL = "verify-email"
TEMPLATE_RESET_PASSWORD = "reset-password"
TEMPLATE_WELCOME = "welcome"

# ============================================================
# AUTH MESSAGES
# ============================================================

SIGNUP_SUCCESS_MESSAGE = "Verification email sent. Please check your email to continue."
VERIFICATION_RESENT_MESSAGE = "Verification email sent again. Please check your inbox."
FORGOT_PASSWORD_SENT_MESSAGE = "Recovery password email sent successfully"
FORGOT_PASSWORD_RESENT_MESSAGE = "Recovery password email sent again"
PASSWORD_RESET_MESSAGE = "Password reset successful"
LOGOUT_MESSAGE = "Logged out successfully"
SESSION_LOGOUT_MESSAGE = "Session logged out successfully"
TERMINATE_ALL_MESSAGE = "All sessions terminated"
USER_DELETED_MESSAGE = "User deleted successfully"

# ============================================================
# ERROR MESSAGES
# ============================================================

DUPLICATE_EMAIL_ERROR = "Email already registered"
USER_NOT_FOUND_ERROR = "No user found with this email!"
RESET_USER_NOT_FOUND_ERROR = "User with this email does not exist"
USER_ID_NOT_FOUND_ERROR = "User not found"
SESSION_NOT_FOUND_ERROR = "Session not found"
INVALID_VERIFY_TOKEN_ERROR = "Invalid verification token or user email"
INVALID_RESET_TOKEN_ERROR = "Invalid user email or token"
INVALID_REFRESH_TOKEN_ERROR = "Invalid refresh token"
INVALID_CREDENTIALS_ERROR = "Invalid credentials"
PROFILE_INCOMPLETE_ERROR = "Please complete your profile before logging in"
NOT_VERIFIED_ERROR = "Email must be verified before completing profile"
ALREADY_VERIFIED_ERROR = "Email is already verified"
ALREADY_COMPLETED_ERROR = "Profile is already completed"
PROFILE_OWNERSHIP_ERROR = "You can only complete your own profile"
SESSION_CONFLICT_ERROR = "You are already logged in on another device: {device}"
ADMIN_ONLY_ERROR = "You are not allowed to perform this action"

# ============================================================
# DEFAULTS
# ============================================================

ADMIN_SEED_FIRST_NAME = "MRCS"
ADMIN_SEED_LAST_NAME = "Admin"
ADMIN_SEED_COLLEGE = "SOMC"
