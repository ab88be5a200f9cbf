"""
Log in against a Directus-style authentication endpoint.

Usage:

    python examples/login.py https://cms.example.com mark@example.com
"""

from __future__ import annotations

import asyncio
import getpass
import sys

from pydantic import BaseModel

from typed_dispatch import ApiErrors, Err, HttpMethod, Ok, configure_logging, send_and_parse


class AuthenticationRequest(BaseModel):
    email: str
    password: str


class AuthenticationPayload(BaseModel):
    expires: int
    refresh_token: str
    access_token: str


class AuthenticationResponse(BaseModel):
    data: AuthenticationPayload


async def main(base_url: str, email: str) -> int:
    request = AuthenticationRequest(email=email, password=getpass.getpass())
    result = await send_and_parse(
        request,
        f"{base_url.rstrip('/')}/auth/login",
        {},
        HttpMethod.POST,
        response_type=AuthenticationResponse,
        error_type=ApiErrors,
    )
    match result:
        case Ok(response):
            print(f"logged in, token expires in {response.data.expires} ms")
            return 0
        case Err(errors):
            for error in errors.errors:
                print(f"[{error.extensions.code}] {error.message}", file=sys.stderr)
            return 1


if __name__ == "__main__":
    if len(sys.argv) != 3:
        sys.exit(__doc__)
    configure_logging()
    sys.exit(asyncio.run(main(sys.argv[1], sys.argv[2])))
