"""Parser for Bruno environment files (``environments/*.bru``).

Only the subset of the ``.bru`` dialect needed to find variables is
understood:

    vars {
      API_URL: https://example.com
      ~DEBUG: true
    }
    vars:secret [
      API_KEY,
      ~OLD_TOKEN
    ]

A leading ``~`` marks a variable as disabled. Everything in the
``vars:secret`` list is secret and has no value on disk.
"""
import logging
from pathlib import Path
from typing import Iterable, List, Optional

from .errors import MalformedFileError, NotFoundError
from .models import Environment, SecretMap, Variable
from .reporter import LoggingReporter, Reporter

logger = logging.getLogger(__name__)

ENVIRONMENTS_DIR = "environments"
ENVIRONMENT_EXTENSION = ".bru"
REFERENCE_SCHEME = "vault://"

VARS_OPEN = "vars {"
VARS_CLOSE = "}"
SECRET_OPEN = "vars:secret ["
SECRET_CLOSE = "]"


def _parse_variable_line(stripped: str, in_secret: bool) -> Optional[Variable]:
    """Turn one stripped block line into a Variable, or None for blank names."""
    disabled = stripped.startswith("~")
    item = stripped.lstrip("~").rstrip(",").strip()

    name, sep, value = item.partition(":")
    name = name.strip()
    if not name:
        return None

    if in_secret or not sep:
        parsed_value = None
    else:
        parsed_value = value.strip()

    return Variable(
        name=name,
        value=parsed_value,
        enabled=not disabled,
        is_secret=in_secret,
    )


def parse_environment(
    content: str,
    name: str,
    strict: bool = True,
    reporter: Optional[Reporter] = None,
) -> Environment:
    """
    Parse the text of one environment file.

    Args:
        content: Raw file contents
        name: Environment name (the file stem)
        strict: Raise on unterminated, nested or mis-closed blocks instead of warning
        reporter: Receives warnings in lenient mode

    Returns:
        Environment with variables in input order

    Raises:
        MalformedFileError: In strict mode, when a block is nested, closed
            with the wrong bracket, or still open at end of file
    """
    reporter = reporter or LoggingReporter(logger)
    variables: List[Variable] = []

    in_vars = False
    in_secret = False

    for lineno, line in enumerate(content.splitlines(), start=1):
        stripped = line.strip()

        if stripped in (VARS_OPEN, SECRET_OPEN):
            if in_vars or in_secret:
                message = f"Environment '{name}' line {lineno}: '{stripped}' opened inside another block"
                if strict:
                    raise MalformedFileError(message, suggestions=["Close the previous block before opening a new one"])
                reporter.warn(message)
            in_vars = stripped == VARS_OPEN
            in_secret = stripped == SECRET_OPEN
            continue

        if in_vars and stripped == VARS_CLOSE:
            in_vars = False
            continue

        if in_secret and stripped == SECRET_CLOSE:
            in_secret = False
            continue

        if (in_vars or in_secret) and stripped in (VARS_CLOSE, SECRET_CLOSE):
            block = VARS_OPEN if in_vars else SECRET_OPEN
            message = f"Environment '{name}' line {lineno}: '{stripped}' does not close block '{block}'"
            if strict:
                raise MalformedFileError(
                    message,
                    suggestions=["Close 'vars {' with '}' and 'vars:secret [' with ']'"],
                )
            reporter.warn(message)
            continue

        if not (in_vars or in_secret) or not stripped:
            continue

        variable = _parse_variable_line(stripped, in_secret)
        if variable is None:
            logger.debug(f"Skipping line {lineno} in environment '{name}': empty variable name")
            continue
        variables.append(variable)

    if in_vars or in_secret:
        block = VARS_OPEN if in_vars else SECRET_OPEN
        message = f"Environment '{name}': block '{block}' is not closed before end of file"
        if strict:
            raise MalformedFileError(
                message,
                suggestions=[f"Add the closing '{VARS_CLOSE if in_vars else SECRET_CLOSE}' to the environment file",
                             "Or re-run with --lenient to accept the variables read so far"],
            )
        reporter.warn(message)

    return Environment(name=name, variables=variables)


def parse_environments(
    collection_dir,
    strict: bool = True,
    reporter: Optional[Reporter] = None,
) -> List[Environment]:
    """
    Parse every environment file of a Bruno collection.

    Files are read in name order so output is deterministic.

    Raises:
        NotFoundError: If ``<collection_dir>/environments`` does not exist
    """
    environments_path = Path(collection_dir) / ENVIRONMENTS_DIR
    if not environments_path.is_dir():
        raise NotFoundError(
            f"No environments directory found at {environments_path}",
            suggestions=["Check that the path points at a Bruno collection with at least one environment"],
        )

    environments = []
    for file_path in sorted(environments_path.glob(f"*{ENVIRONMENT_EXTENSION}")):
        logger.debug(f"Parsing environment file {file_path}")
        content = file_path.read_text(encoding="utf-8")
        environments.append(parse_environment(content, file_path.stem, strict=strict, reporter=reporter))

    return environments


def build_reference(vault: str, item: str, environment: str, variable: str) -> str:
    """Build the vault reference stored in place of a secret value."""
    return f"{REFERENCE_SCHEME}{vault}/{item}/{environment}/{variable}"


def extract_secrets(environments: Iterable[Environment], vault: str, item: str) -> SecretMap:
    """
    Map each environment to its secret variables, values replaced by references.

    Pure transform: the input environments are left untouched. Environments
    without secrets map to an empty list.
    """
    secret_map: SecretMap = {}
    for environment in environments:
        secret_map[environment.name] = [
            variable.with_value(build_reference(vault, item, environment.name, variable.name))
            for variable in environment.secrets
        ]
    return secret_map
