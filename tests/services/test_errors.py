import runpy
import warnings

from app.services import errors


def test_error_module_uses_current_status_names():
    with warnings.catch_warnings():
        warnings.simplefilter("error", DeprecationWarning)
        namespace = runpy.run_path(errors.__file__)

    assert namespace["PayloadTooLargeError"].status_code == 413


def test_cause_is_reported_alongside_message():
    error = errors.UploadFailedError("Error processing file", cause=ValueError("bad row"))

    assert error.status_code == 500
    assert error.to_response_content() == {
        "detail": "Error processing file",
        "error": "bad row",
    }
