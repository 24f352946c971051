# schema_check.py
# Draft 7 schema and data checks with source line annotation
# Author: Bradley Saucier - call sign viper1
#
# Disclaimer:
# This is a personal project submitted for a coding competition.
# It does not represent or reflect the views, policies, or positions
# of the United States Department of Defense or Anduril Industries.
#
# =============================================================================
#  CHECKER IMPLEMENTATION: PARSE, VALIDATE, ANNOTATE
# =============================================================================
#
# Flow for one schema/data pair:
# 1. Parse the schema text. A parse failure ends the run.
# 2. Check the schema against the Draft 7 meta-schema.
# 3. Parse and validate the data text, if any, against the schema.
# 4. Attach a source line to every error via json_locator.locate().
#
# Validation itself is jsonschema's job. Compiled validators live in an
# owned ValidatorCache that empties itself every CACHE_CLEAR_THRESHOLD
# compilations.
#
# =============================================================================
#  REFERENCES
# =============================================================================
# [1] json-schema.org - Draft 7 Validation
# [2] RFC 6901 - JavaScript Object Notation (JSON) Pointer
# =============================================================================

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional

from jsonschema import Draft7Validator, FormatChecker
from jsonschema.exceptions import SchemaError
from referencing.exceptions import Unresolvable

from json_locator import ROOT_TOKEN, locate

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# CONSTANTS AND TUNABLES
# ---------------------------------------------------------------------------
CACHE_CLEAR_THRESHOLD = 100   # Compilations before the validator cache is emptied
SCHEMA_ERROR_PREFIX   = "Schema error: "

# Checks schemas against the Draft 7 meta-schema; shared, it holds no state
_META_VALIDATOR = Draft7Validator(Draft7Validator.META_SCHEMA, format_checker=FormatChecker())

# ---------------------------------------------------------------------------
# RESULT RECORDS
# ---------------------------------------------------------------------------
@dataclass
class ValidationIssue:
    """One validation error, plus the source line it points at when known."""
    path: str
    message: str
    keyword: str
    schema_path: str = ""
    params: Dict[str, Any] = field(default_factory=dict)
    line_number: Optional[int] = None


@dataclass
class ValidationResult:
    valid: bool
    errors: List[ValidationIssue] = field(default_factory=list)


@dataclass
class ParseResult:
    success: bool
    data: Any = None
    error: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None


@dataclass
class CheckReport:
    """Outcome of checking one schema text and an optional data text."""
    schema_parse: Optional[ParseResult] = None
    schema_result: Optional[ValidationResult] = None
    data_parse: Optional[ParseResult] = None
    data_result: Optional[ValidationResult] = None

    @property
    def valid(self) -> bool:
        for parsed in (self.schema_parse, self.data_parse):
            if parsed is not None and not parsed.success:
                return False
        for result in (self.schema_result, self.data_result):
            if result is not None and not result.valid:
                return False
        return True

# ---------------------------------------------------------------------------
# PARSING
# ---------------------------------------------------------------------------
class _ConstantError(ValueError):
    pass


def _reject_constant(name: str):
    raise _ConstantError(f"Unexpected token {name}")


def parse_json(text: str) -> ParseResult:
    """
    Parse JSON text; failures come back as a ParseResult, never raised.

    NaN, Infinity and -Infinity are rejected as in RFC 8259. Failures with
    no position (rejected constants, nesting too deep) carry no line.
    """
    try:
        return ParseResult(success=True, data=json.loads(text, parse_constant=_reject_constant))
    except json.JSONDecodeError as exc:
        return ParseResult(success=False, error=exc.msg, line=exc.lineno, column=exc.colno)
    except _ConstantError as exc:
        return ParseResult(success=False, error=str(exc))
    except RecursionError:
        return ParseResult(success=False, error="Nesting too deep")

# ---------------------------------------------------------------------------
# PATH FORMATTING
# ---------------------------------------------------------------------------
def to_pointer(parts: Iterable[Any]) -> str:
    """RFC 6901 pointer for a jsonschema path deque; ROOT_TOKEN when empty."""
    segments = [str(p).replace("~", "~0").replace("/", "~1") for p in parts]
    if not segments:
        return ROOT_TOKEN
    return "/" + "/".join(segments)


def _schema_path(parts: Iterable[Any]) -> str:
    return "#/" + "/".join(str(p) for p in parts)


def _issue_from(error) -> ValidationIssue:
    return ValidationIssue(
        path=to_pointer(error.absolute_path),
        message=error.message,
        keyword=str(error.validator),
        schema_path=_schema_path(error.absolute_schema_path),
        params={str(error.validator): error.validator_value},
    )

# ---------------------------------------------------------------------------
# VALIDATOR CACHE
# ---------------------------------------------------------------------------
class ValidatorCache:
    """
    Compiled Draft7Validator instances keyed by canonical schema text.

    Every miss counts as a compilation. Reaching `threshold` compilations
    empties the cache and restarts the count.
    """
    def __init__(self, threshold: int = CACHE_CLEAR_THRESHOLD):
        if threshold < 1:
            raise ValueError("threshold must be at least 1")
        self.threshold = threshold
        self.compilations = 0
        self._validators: Dict[str, Draft7Validator] = {}

    def __len__(self):
        return len(self._validators)

    def clear(self):
        self._validators.clear()
        self.compilations = 0

    def get(self, schema: Any) -> Draft7Validator:
        key = json.dumps(schema, sort_keys=True)
        validator = self._validators.get(key)
        if validator is not None:
            return validator

        self.compilations += 1
        if self.compilations >= self.threshold:
            logger.debug("validator cache hit %d compilations, clearing", self.compilations)
            self.clear()
        logger.debug("compiling validator (%d cached)", len(self._validators))
        validator = Draft7Validator(schema, format_checker=FormatChecker())
        self._validators[key] = validator
        return validator

# ---------------------------------------------------------------------------
# ANNOTATION
# ---------------------------------------------------------------------------
def annotate_errors(text: str, errors: Iterable[ValidationIssue]) -> List[ValidationIssue]:
    """Copy each error with line_number resolved against `text`."""
    return [replace(err, line_number=locate(text, err.path)) for err in errors]

# ---------------------------------------------------------------------------
# CHECKER
# ---------------------------------------------------------------------------
class SchemaChecker:
    """Owns a ValidatorCache and runs schema and data checks against it."""

    def __init__(self, cache: Optional[ValidatorCache] = None):
        self.cache = cache if cache is not None else ValidatorCache()

    def validate_schema(self, schema: Any) -> ValidationResult:
        try:
            errors = [_issue_from(err) for err in _META_VALIDATOR.iter_errors(schema)]
        except RecursionError:
            return _root_failure("Schema nesting too deep", "schema")
        return ValidationResult(valid=not errors, errors=errors)

    def validate_data(self, schema: Any, data: Any) -> ValidationResult:
        """
        Validate `data` against `schema`.

        An invalid schema short-circuits with its own errors, each message
        prefixed with SCHEMA_ERROR_PREFIX. Problems found while compiling or
        resolving $ref come back as one root-level error.
        """
        schema_result = self.validate_schema(schema)
        if not schema_result.valid:
            return ValidationResult(
                valid=False,
                errors=[
                    replace(err, message=SCHEMA_ERROR_PREFIX + err.message)
                    for err in schema_result.errors
                ],
            )
        return self._validate_instance(schema, data)

    def _validate_instance(self, schema: Any, data: Any) -> ValidationResult:
        """Run the cached validator for an already checked schema."""
        try:
            validator = self.cache.get(schema)
            errors = [_issue_from(err) for err in validator.iter_errors(data)]
        except SchemaError as exc:
            return _root_failure(exc.message, "schema")
        except Unresolvable as exc:
            return _root_failure(f"Unresolvable reference: {exc}", "validation")
        except RecursionError:
            # Self-referencing $ref cycles, or data nested past the stack.
            return _root_failure("Recursion too deep while validating", "validation")
        return ValidationResult(valid=not errors, errors=errors)

    def check(self, schema_text: str, data_text: str = "") -> CheckReport:
        """
        Parse, validate and annotate a schema text and optional data text.

        Blank schema text yields an empty report. Data is still parsed
        against an invalid schema, but not validated; data_result stays None.
        """
        report = CheckReport()
        if not schema_text.strip():
            return report

        report.schema_parse = parse_json(schema_text)
        if not report.schema_parse.success:
            return report
        schema = report.schema_parse.data

        result = self.validate_schema(schema)
        result.errors = annotate_errors(schema_text, result.errors)
        report.schema_result = result

        if not data_text.strip():
            return report

        report.data_parse = parse_json(data_text)
        if not report.data_parse.success:
            return report

        if not report.schema_result.valid:
            return report

        result = self._validate_instance(schema, report.data_parse.data)
        result.errors = annotate_errors(data_text, result.errors)
        report.data_result = result
        return report


def _root_failure(message: str, keyword: str) -> ValidationResult:
    return ValidationResult(
        valid=False,
        errors=[ValidationIssue(path=ROOT_TOKEN, message=message, keyword=keyword)],
    )

# ---------------------------------------------------------------------------
# CLI ENTRYPOINT
# ---------------------------------------------------------------------------
def _format_issue(fname: str, issue: ValidationIssue) -> str:
    line = issue.line_number if issue.line_number is not None else "?"
    return f"{fname}:{line}: [{issue.keyword}] {issue.path}: {issue.message}"


def _format_parse(fname: str, parsed: ParseResult) -> str:
    line = parsed.line if parsed.line is not None else "?"
    return f"{fname}:{line}: SyntaxError: {parsed.error}"


def _read(fname: str) -> str:
    with open(fname, "r", encoding="utf-8") as fh:
        return fh.read()


def _cli(argv: List[str]):
    """
    Command-line interface for schema/data checks.

    0 when everything is valid, 1 on parse failure, validation errors or
    unreadable input.
    """
    ap = argparse.ArgumentParser(description="Draft 7 JSON Schema checker")
    ap.add_argument("schema", help="JSON Schema file")
    ap.add_argument("data", nargs="?", help="JSON data file to validate")
    ap.add_argument("--cache-threshold", type=int, default=CACHE_CLEAR_THRESHOLD)
    ap.add_argument("--verbose", action="store_true", help="enable debug logging")
    args = ap.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    try:
        schema_text = _read(args.schema)
        data_text = _read(args.data) if args.data else ""
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    checker = SchemaChecker(ValidatorCache(args.cache_threshold))
    report = checker.check(schema_text, data_text)

    if report.schema_parse is None:
        print(f"error: {args.schema} is empty", file=sys.stderr)
        return 1

    problems = []
    if not report.schema_parse.success:
        problems.append(_format_parse(args.schema, report.schema_parse))
    if report.schema_result is not None:
        problems.extend(_format_issue(args.schema, i) for i in report.schema_result.errors)
    if report.data_parse is not None and not report.data_parse.success:
        problems.append(_format_parse(args.data, report.data_parse))
    if report.data_result is not None:
        problems.extend(_format_issue(args.data, i) for i in report.data_result.errors)
    for line in problems:
        print(line, file=sys.stderr)

    if report.valid:
        print("OK")
        return 0
    return 1

# ---------------------------------------------------------------------------
# MAIN GUARD
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    sys.exit(_cli(sys.argv[1:]))
# viper1 out
