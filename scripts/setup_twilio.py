#!/usr/bin/env python3
"""
Point a Twilio phone number's voice webhook at this service.

    python scripts/setup_twilio.py +61400000000 https://joinery.example.com
    python scripts/setup_twilio.py +61400000000 https://joinery.example.com --account-sid AC... --auth-token ...

Credentials default to TWILIO_ACCOUNT_SID / TWILIO_AUTH_TOKEN.
"""

import argparse
import os
import sys

from twilio.rest import Client

VOICE_PATH = "/twilio/voice"


class NumberNotFound(Exception):
    pass


def configure_voice_webhook(client, phone_number: str, base_url: str) -> str:
    """Set the number's voice URL to <base_url>/twilio/voice (POST) and return it."""
    numbers = client.incoming_phone_numbers.list(phone_number=phone_number, limit=1)
    if not numbers:
        raise NumberNotFound(phone_number)

    voice_url = base_url.rstrip("/") + VOICE_PATH
    numbers[0].update(voice_url=voice_url, voice_method="POST")
    return voice_url


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Configure the Twilio voice webhook")
    parser.add_argument("phone_number", help="Twilio number in E.164 form, e.g. +61400000000")
    parser.add_argument("base_url", help="Public base URL of the deployed service")
    parser.add_argument("--account-sid", default=os.getenv("TWILIO_ACCOUNT_SID"))
    parser.add_argument("--auth-token", default=os.getenv("TWILIO_AUTH_TOKEN"))
    args = parser.parse_args(argv)

    if not args.account_sid or not args.auth_token:
        parser.error("Twilio credentials missing: set TWILIO_ACCOUNT_SID and TWILIO_AUTH_TOKEN")
    if not args.base_url.startswith("https://"):
        print("Warning: Twilio expects an https webhook URL")

    client = Client(args.account_sid, args.auth_token)
    try:
        voice_url = configure_voice_webhook(client, args.phone_number, args.base_url)
    except NumberNotFound:
        print(f"❌ {args.phone_number} is not a number on this Twilio account")
        return 1

    print(f"✅ {args.phone_number} voice webhook -> POST {voice_url}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
