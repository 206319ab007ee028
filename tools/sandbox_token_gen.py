import sys

from bikya.custom_types import TokenScope
from bikya.jwt_manager import create_jwt_token

TEST_USER_ID = "u1"

jwt_token = create_jwt_token(
    {"user_id": sys.argv[1] if len(sys.argv) > 1 else TEST_USER_ID},
    TokenScope.USER,
)

print(jwt_token)
