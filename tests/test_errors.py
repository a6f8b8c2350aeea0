from microblink_api.errors import RecognitionError, StatusCodes


def test_recognition_error_defaults_to_invalid_json():
    error = RecognitionError("not json")

    assert str(error) == "Result is not valid JSON"
    assert error.code is StatusCodes.RESULT_IS_NOT_VALID_JSON
    assert error.as_dict() == {
        "error": "Result is not valid JSON",
        "code": StatusCodes.RESULT_IS_NOT_VALID_JSON,
        "responseText": "not json",
    }


def test_recognition_error_equality():
    assert RecognitionError("a") == RecognitionError("a")
    assert RecognitionError("a") != RecognitionError("b")
    assert len({RecognitionError("a"), RecognitionError("a")}) == 1


def test_status_codes_are_strings():
    assert StatusCodes.RESULT_IS_NOT_VALID_JSON == "RESULT_IS_NOT_VALID_JSON"
    assert StatusCodes.RESULT_IS_NOT_VALID_JSON.value == "RESULT_IS_NOT_VALID_JSON"
    assert [code.name for code in StatusCodes] == ["RESULT_IS_NOT_VALID_JSON"]
