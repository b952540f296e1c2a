"""
Application Constants

Centralized location for all application constants, organized by domain.
Deployment-specific values (secrets, database URL, token lifetimes) are read
from the environment in the modules that use them; the values here are the
defaults and the fixed business rules.
"""

# =============================================================================
# API Configuration
# =============================================================================

class APIConfig:
    """API-level configuration constants"""

    # API Versioning
    API_V1_PREFIX = "/api/v1"
    API_VERSION = "1.0.0"
    API_TITLE = "Group Polls API"
    API_DESCRIPTION = """
    Group-scoped polling API. Users sign up, an admin creates a group and adds
    members, and members vote on the group's polls.

    ## Features
    - Sign up / sign in with access and refresh tokens
    - Token refresh and revocation (sign out)
    - Groups with a single admin and exclusive membership
    - Polls with 2-5 options, exactly-once voting and closing
    """

    # CORS Configuration
    ALLOWED_ORIGINS = [
        "http://localhost:3000",  # React dev server
        "http://localhost:5173",  # Vite dev server
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]
    ALLOWED_METHODS = ["GET", "POST", "PATCH", "DELETE", "OPTIONS"]


# =============================================================================
# Authentication & Security
# =============================================================================

class AuthConfig:
    """Authentication and security constants"""

    # JWT Configuration
    ACCESS_TOKEN_EXPIRE_MINUTES = 60
    REFRESH_TOKEN_EXPIRE_DAYS = 21
    ALGORITHM = "HS256"
    TOKEN_TYPE = "bearer"
    DEFAULT_SECRET_KEY = "change-me-in-production"

    # Password requirements (zxcvbn score, 0-4 scale)
    MIN_PASSWORD_SCORE = 3
    MAX_PASSWORD_LENGTH = 72  # bcrypt and zxcvbn input limit
    BCRYPT_ROUNDS = 12

    # Claim names
    USERNAME_CLAIM = "username"
    EMAIL_CLAIM = "email"
    ROLE_CLAIM = "role"  # only refresh tokens carry it


# =============================================================================
# Business Logic Limits
# =============================================================================

class BusinessLimits:
    """Business rules and validation constants"""

    # Poll limits
    MIN_POLL_OPTIONS = 2
    MAX_POLL_OPTIONS = 5
    MAX_QUESTION_LENGTH = 200
    MAX_POLL_OPTION_LENGTH = 100

    # Group limits
    MIN_GROUP_NAME_LENGTH = 1
    MAX_GROUP_NAME_LENGTH = 100

    # User profile limits
    MIN_USERNAME_LENGTH = 3
    MAX_USERNAME_LENGTH = 50


# =============================================================================
# Error Messages
# =============================================================================

class ErrorMessages:
    """Standardized error messages"""

    # Authentication errors
    AUTH_REQUIRED = "Authentication required"
    INVALID_USERNAME = "Invalid username"
    INVALID_PASSWORD = "Invalid password"
    INVALID_TOKEN = "Invalid or revoked token"
    INVALID_REFRESH_TOKEN = "Invalid or revoked refresh token"
    SIGNOUT_TOKEN_MISMATCH = "Send the same token as in the Authorization header"
    WEAK_PASSWORD = "Password is not strong enough"

    # Authorization errors
    INSUFFICIENT_ROLE = "Insufficient role for this operation"
    NOT_GROUP_ADMIN = "You are not the admin of this group"

    # Resource errors
    USER_NOT_FOUND = "User not found"
    GROUP_NOT_FOUND = "Group not found"
    ADMIN_HAS_NO_GROUP = "Admin must create a group first"
    POLL_NOT_FOUND = "Poll not found"
    POLL_OPTION_NOT_FOUND = "Poll option not found"

    # Conflicts
    DUPLICATE_EMAIL = "User with this email already exists"
    DUPLICATE_USERNAME = "User with this username already exists"
    ALREADY_ADMIN = "Admin can create only one group"
    ALREADY_IN_GROUP = "User already belongs to a group"
    TARGET_IS_ADMIN = "User administers a group and cannot join another"
    ALREADY_VOTED = "User has already voted on this poll"

    # Business rule violations
    CANNOT_REMOVE_ADMIN = "The group admin cannot be removed from their own group"
    NOT_A_MEMBER = "User is not a member of this group"
    POLL_CLOSED = "Poll is closed"
    WRONG_GROUP = "Poll does not belong to the user's group"
    POLL_HAS_VOTES = "A poll that has received votes can only be closed"
    INVALID_OPTION_COUNT = "A poll needs between 2 and 5 distinct options"

    # System errors
    DATABASE_ERROR = "Database operation failed"
    INTERNAL_ERROR = "An unexpected error occurred"
    VALIDATION_ERROR = "Validation failed"


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """Standardized error codes for API responses"""

    # Authentication & Authorization
    AUTH_ERROR = "AUTH_ERROR"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_TOKEN = "INVALID_TOKEN"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    # Validation
    VALIDATION_ERROR = "VALIDATION_ERROR"
    BAD_REQUEST = "BAD_REQUEST"

    # Business Logic
    DUPLICATE_RESOURCE = "DUPLICATE_RESOURCE"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"

    # System
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Database Configuration
# =============================================================================

class DatabaseConfig:
    """Database-related constants"""

    DEFAULT_DATABASE_URL = "sqlite:///./group_polls.db"

    # Query limits
    DEFAULT_PAGE_SIZE = 10
    MAX_PAGE_SIZE = 100


# =============================================================================
# Logging Configuration
# =============================================================================

class LoggingConfig:
    """Logging configuration constants"""

    # Log levels
    DEFAULT_LOG_LEVEL = "INFO"
    DATABASE_LOG_LEVEL = "WARNING"

    # Log formats
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
