"""Input validation for CLI arguments."""
import argparse
import re
import sys

# Secret Manager ids: letters, digits, underscores and hyphens, 1-255 chars
SECRET_NAME_PATTERN = re.compile(r'^[a-zA-Z0-9_-]{1,255}$')


def validate_secret_name(name: str) -> None:
    """
    Validate secret name matches GCP requirements.

    Args:
        name: Secret name to validate

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not name:
        print("Error: Secret name cannot be empty", file=sys.stderr)
        print("\nSecret names must match: [a-zA-Z0-9_-]", file=sys.stderr)
        sys.exit(2)

    if not SECRET_NAME_PATTERN.match(name):
        print(f"Error: Invalid secret name '{name}'", file=sys.stderr)
        print("\nAllowed characters: letters, numbers, underscores (_), hyphens (-)", file=sys.stderr)
        print("Maximum length: 255 characters", file=sys.stderr)
        print("\nExamples of valid names:", file=sys.stderr)
        print("  ✓ MY_SECRET", file=sys.stderr)
        print("  ✓ api-key-prod", file=sys.stderr)
        print("\nExamples of invalid names:", file=sys.stderr)
        print("  ✗ api.key (contains dot)", file=sys.stderr)
        print("  ✗ prod/db (contains slash)", file=sys.stderr)
        sys.exit(2)


def validate_max_items(value: str) -> int:
    """argparse type for --max-items: a strictly positive integer."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: '{value}'")
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number
