"""Interactive CLI login simulator — exercise the OTP flow without a UI."""

import logging

from otp_login.api.schemas import normalize_email
from otp_login.config import Settings
from otp_login.models.otp import FailureReason
from otp_login.services.session_manager import SessionManager

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
BOLD = "\033[1m"
RESET = "\033[0m"

HELP = (
    f"{DIM}Commands: verify <code> | resend | time | back | logout | quit{RESET}"
)


def describe(result, max_attempts: int) -> str:
    """Turn a validation result into the message a login screen would show."""
    if result.success:
        return f"{GREEN}✓ Verified! Signing you in…{RESET}"
    if result.reason is FailureReason.EXPIRED:
        return f"{RED}This OTP has expired. Please request a new one.{RESET}"
    if result.reason is FailureReason.MAX_ATTEMPTS:
        return f"{RED}Maximum {max_attempts} attempts reached. Type 'resend'.{RESET}"
    if result.reason is FailureReason.WRONG_CODE:
        plural = "" if result.remaining == 1 else "s"
        return f"{RED}Incorrect code. {result.remaining} attempt{plural} remaining.{RESET}"
    return f"{RED}Verification failed. Please request a code first.{RESET}"


def ask_email() -> str | None:
    while True:
        try:
            raw = input(f"{YELLOW}Email address: {RESET}")
        except (KeyboardInterrupt, EOFError):
            return None
        try:
            return normalize_email(raw)
        except ValueError as exc:
            print(f"{RED}{exc}{RESET}")


def main() -> None:
    print(f"\n{BOLD}{'=' * 52}")
    print("  🔐  OTP Login — Simulator")
    print(f"{'=' * 52}{RESET}\n")

    # Development mode so the code is printed in the logs
    settings = Settings(mode="development")
    logging.basicConfig(level=logging.INFO, format=f"{DIM}%(message)s{RESET}")

    sessions = SessionManager(settings=settings)
    session = sessions.open()

    email = ask_email()
    while email is not None:
        otp = session.otp_manager
        otp.generate(email)
        print(f"{DIM}A {settings.otp_length}-digit code was sent to {email}{RESET}")
        print(HELP)

        while True:
            try:
                user_input = input(f"{BLUE}{BOLD}>{RESET} ").strip()
            except (KeyboardInterrupt, EOFError):
                user_input = "quit"

            command, _, arg = user_input.partition(" ")
            command = command.lower()

            if command == "quit":
                print(f"{DIM}Goodbye!{RESET}")
                return

            if command == "time":
                print(f"{DIM}{otp.remaining_seconds(email)}s remaining{RESET}")
            elif command == "resend":
                otp.resend(email)
                print(f"{DIM}New code sent to {email}{RESET}")
            elif command == "back":
                email = ask_email()
                break
            elif command == "verify" and arg:
                result = otp.validate(email, arg.strip())
                print(describe(result, otp.max_attempts))
                if result.success:
                    session.mark_authenticated(email)
                    print(f"{GREEN}{BOLD}Signed in as {email}.{RESET} Type 'logout' to end.")
            elif command == "logout" and session.is_authenticated:
                sessions.analytics.log_logout(email, session.duration_seconds())
                sessions.clear(session.session_id)
                print(f"{GREEN}👋 You have been logged out.{RESET}\n")
                session = sessions.open()
                email = ask_email()
                break
            else:
                print(HELP)

    print(f"\n{DIM}Goodbye!{RESET}")


if __name__ == "__main__":
    main()
