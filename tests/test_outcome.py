"""Tests for the WorkflowOutcome union."""

import pytest

from pylayoutexport.core import ExportError, FailureKind, UploadError
from pylayoutexport.executor import Failure, Success, is_failure, is_success


def test_success_result_is_read_only():
    outcome = Success({"output-url": "https://x/F1.pdf"}, "F1")

    with pytest.raises(TypeError):
        outcome.result["output-url"] = "other"

    assert outcome.output_url == "https://x/F1.pdf"


def test_success_copies_result():
    result = {"output-url": "u"}
    outcome = Success(result, "F1")
    result["extra"] = True

    assert "extra" not in outcome.result


def test_type_guards():
    success = Success({"output-url": "u"}, "F1")
    failure = Failure("empty")

    assert is_success(success) and not is_failure(success)
    assert is_failure(failure) and not is_success(failure)
    assert success.is_success() and failure.is_failure()


def test_failure_equality_ignores_error():
    assert Failure("network-error", "F2", FailureKind.UPLOAD, UploadError()) == Failure(
        "network-error", "F2", FailureKind.UPLOAD
    )


def test_failure_defaults():
    failure = Failure("generation-error")

    assert failure.file_id is None
    assert failure.kind is FailureKind.GENERATION
    assert failure.error is None


def test_raise_error_without_original():
    failure = Failure("polling-timeout", "F1", FailureKind.POLL)

    with pytest.raises(ExportError) as exc_info:
        failure.raise_error()

    assert exc_info.value.reason == "polling-timeout"
    assert exc_info.value.file_id == "F1"


def test_raise_error_with_original():
    original = UploadError("file-too-large")

    with pytest.raises(UploadError) as exc_info:
        Failure("file-too-large", "F1", FailureKind.UPLOAD, original).raise_error()

    assert exc_info.value is original


def test_pattern_matching():
    def describe(outcome):
        match outcome:
            case Success(result, file_id):
                return f"{file_id}: {result['output-url']}"
            case Failure(reason, file_id):
                return f"{file_id}: {reason}"

    assert describe(Success({"output-url": "u"}, "F1")) == "F1: u"
    assert describe(Failure("empty", None, FailureKind.EMPTY)) == "None: empty"


def test_failure_kind_file_id_expectations():
    assert not FailureKind.EMPTY.has_file_id
    assert not FailureKind.CONFIGURATION.has_file_id
    assert all(
        kind.has_file_id
        for kind in (
            FailureKind.UPLOAD,
            FailureKind.GENERATION,
            FailureKind.POLL,
            FailureKind.POST_PROCESS,
        )
    )
