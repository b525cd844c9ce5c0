"""Input validation for CLI arguments."""
import sys

OUTPUT_SUFFIXES = (".json", ".yml", ".yaml")


def _fail(lines) -> None:
    for line in lines:
        print(line, file=sys.stderr)
    sys.exit(2)


def validate_reference_part(kind: str, value: str) -> None:
    """
    Validate a vault or item name used inside vault references.

    References are ``vault://<vault>/<item>/<environment>/<variable>``,
    so the names may not be empty or contain a slash.

    Args:
        kind: "Vault" or "Title", used in messages
        value: Name to validate

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not value or not value.strip():
        _fail([f"Error: {kind} cannot be empty"])

    if "/" in value:
        _fail([
            f"Error: Invalid {kind.lower()} '{value}'",
            "\nSlashes (/) separate the parts of a vault reference and are not allowed.",
            "\nExamples of valid names:",
            "  ✓ Engineering",
            "  ✓ Bruno API Secrets",
        ])


def validate_output_name(name: str) -> None:
    """
    Validate the output file name.

    The file is written inside the collection directory, so only a plain
    file name ending in .json, .yml or .yaml is accepted.

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not name:
        _fail(["Error: Output file name cannot be empty"])

    if "/" in name or "\\" in name:
        _fail([
            f"Error: Invalid output name '{name}'",
            "\nThe output file is saved in the collection directory; pass a file name, not a path.",
        ])

    if not name.lower().endswith(OUTPUT_SUFFIXES):
        _fail([
            f"Error: Invalid output name '{name}'",
            "\nSupported formats: .json, .yml, .yaml",
        ])
