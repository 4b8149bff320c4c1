"""Unit tests for the food analysis handler, parsing and error classification."""

import json
import pytest

from calorie_api.models.analysis import AnalysisErrorCode, AnalyzeFoodRequest
from calorie_api.services.food_analysis import (
    FoodAnalysisError,
    FoodAnalysisHandler,
    build_prompt,
    classify_upstream_error,
    extract_json_object,
    parse_analysis,
)

from conftest import FakeVisionClient


class TestParseAnalysis:
    """Tests for turning model replies into AnalysisResult."""

    def test_json_reply(self):
        result = parse_analysis('{"name":"Apple","calories":95,"analysis":"Medium apple"}')

        assert result.name == "Apple"
        assert result.calories == 95
        assert result.analysis == "Medium apple"

    def test_json_wrapped_in_prose_and_fences(self):
        reply = (
            "Here is my estimate:\n```json\n"
            '{"name": "Caesar salad", "calories": 470, "analysis": "Dressing adds fat"}\n'
            "```\nEnjoy!"
        )

        result = parse_analysis(reply)

        assert result.name == "Caesar salad"
        assert result.calories == 470

    def test_text_fallback(self):
        reply = "Looks like a banana, about 105 calories."

        result = parse_analysis(reply)

        assert result.name == "Looks like a banana, about 105 calories."
        assert result.calories == 300
        assert result.analysis == reply

    def test_text_fallback_uses_first_non_empty_line(self):
        reply = "\n\n  Pad thai  \nRoughly 600 calories with peanuts."

        result = parse_analysis(reply)

        assert result.name == "Pad thai"
        assert result.analysis == reply

    def test_unparseable_braces_fall_back_to_text(self):
        reply = "Pizza slice {approx} 285 kcal"

        result = parse_analysis(reply)

        assert result.name == reply
        assert result.calories == 300

    def test_missing_fields_get_defaults(self):
        result = parse_analysis("{}")

        assert result.name == "Unknown Food"
        assert result.calories == 300
        assert result.analysis == "Unable to analyze food item"

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (250, 250),
            (249.6, 250),
            ("180", 180),
            ("about 200", 300),
            (None, 300),
            (0, 300),
            (-50, 300),
            (True, 300),
            (1e999, 300),
            ("inf", 300),
            ("1e400", 300),
            ("nan", 300),
        ],
    )
    def test_calorie_coercion(self, raw, expected):
        result = parse_analysis(json.dumps({"name": "Toast", "calories": raw, "analysis": "x"}))

        assert result.calories == expected

    def test_extract_json_object_greedy_span(self):
        assert extract_json_object('a {"x": 1} b') == {"x": 1}
        # Two objects form one invalid span under greedy matching
        assert extract_json_object('{"x": 1} and {"y": 2}') is None
        assert extract_json_object("no braces here") is None


class TestBuildPrompt:
    """Tests for prompt construction."""

    def test_prompt_requests_json_keys(self):
        prompt = build_prompt()

        assert '"name"' in prompt
        assert '"calories"' in prompt
        assert '"analysis"' in prompt
        assert "Additional context" not in prompt

    def test_description_is_inserted_before_format_instruction(self):
        prompt = build_prompt("grilled, no sauce")

        context_at = prompt.index("Additional context: grilled, no sauce")
        format_at = prompt.index("Please respond in the following JSON format")
        assert context_at < format_at

    def test_blank_description_is_ignored(self):
        assert "Additional context" not in build_prompt("   ")


class TestClassifyUpstreamError:
    """Tests for mapping upstream exception messages to API errors."""

    @pytest.mark.parametrize(
        "message, code, status",
        [
            ("Error code: 429 - Rate limit reached", AnalysisErrorCode.RATE_LIMITED, 429),
            ("Error code: 400 - image_parse_error", AnalysisErrorCode.INVALID_FORMAT, 400),
            ("You uploaded an unsupported image.", AnalysisErrorCode.INVALID_FORMAT, 400),
            ("Error code: 401 - Incorrect API key", AnalysisErrorCode.INVALID_CREDENTIAL, 401),
            ("You exceeded your current quota", AnalysisErrorCode.RATE_LIMITED, 429),
            ("Connection reset by peer", AnalysisErrorCode.UNKNOWN, 500),
        ],
    )
    def test_classification(self, message, code, status):
        error = classify_upstream_error(RuntimeError(message))

        assert error.error_code == code
        assert error.status_code == status

    def test_429_wins_over_other_markers(self):
        error = classify_upstream_error(
            RuntimeError("Error code: 429 - 400 unsupported image, 401 quota")
        )

        assert error.error_code == AnalysisErrorCode.RATE_LIMITED
        assert error.status_code == 429

    def test_unknown_carries_raw_message(self):
        error = classify_upstream_error(RuntimeError("upstream exploded"))

        assert error.message == "Failed to analyze food image"
        assert error.details == "upstream exploded"

    def test_invalid_format_has_remediation_guidance(self):
        error = classify_upstream_error(RuntimeError("Error code: 400"))

        assert "new photo" in error.message
        assert error.details


class TestFoodAnalysisHandler:
    """Tests for FoodAnalysisHandler.analyze."""

    async def test_success(self, handler, fake_client):
        response = await handler.analyze(
            AnalyzeFoodRequest(image="data:image/png;base64,AAAA", description="")
        )

        assert response.success is True
        assert response.name == "Apple"
        assert response.calories == 95
        assert response.analysis == "Medium apple"
        assert len(fake_client.calls) == 1
        prompt, image_url = fake_client.calls[0]
        assert image_url == "data:image/png;base64,AAAA"
        assert "Additional context" not in prompt

    async def test_description_reaches_prompt(self, handler, fake_client):
        await handler.analyze(
            AnalyzeFoodRequest(image="data:image/jpeg;base64,AAAA", description="two slices")
        )

        prompt, _ = fake_client.calls[0]
        assert "Additional context: two slices" in prompt

    async def test_missing_image(self, handler, fake_client):
        with pytest.raises(FoodAnalysisError) as exc_info:
            await handler.analyze(AnalyzeFoodRequest(description="pasta"))

        assert exc_info.value.error_code == AnalysisErrorCode.MISSING_IMAGE
        assert exc_info.value.status_code == 400
        assert "No image provided" in exc_info.value.message
        assert fake_client.calls == []

    async def test_missing_credential_checked_after_image(self, fake_client):
        handler = FoodAnalysisHandler(api_key="", client=fake_client)

        with pytest.raises(FoodAnalysisError) as exc_info:
            await handler.analyze(AnalyzeFoodRequest(image="data:image/png;base64,AAAA"))

        assert exc_info.value.error_code == AnalysisErrorCode.SERVICE_UNAVAILABLE
        assert exc_info.value.status_code == 500
        assert fake_client.calls == []

        with pytest.raises(FoodAnalysisError) as exc_info:
            await handler.analyze(AnalyzeFoodRequest())

        assert exc_info.value.error_code == AnalysisErrorCode.MISSING_IMAGE

    @pytest.mark.parametrize(
        "image, code",
        [
            ("https://example.com/apple.png", AnalysisErrorCode.INVALID_FORMAT),
            ("data:text/plain;base64,AAAA", AnalysisErrorCode.INVALID_FORMAT),
            ("data:image/svg+xml;base64,AAAA", AnalysisErrorCode.UNSUPPORTED_FORMAT),
            ("data:image/x-icon;base64,AAAA", AnalysisErrorCode.UNSUPPORTED_FORMAT),
        ],
    )
    async def test_rejects_bad_data_uris(self, handler, fake_client, image, code):
        with pytest.raises(FoodAnalysisError) as exc_info:
            await handler.analyze(AnalyzeFoodRequest(image=image))

        assert exc_info.value.error_code == code
        assert exc_info.value.status_code == 400
        assert fake_client.calls == []

    async def test_rejects_oversized_image(self, fake_client):
        handler = FoodAnalysisHandler(api_key="sk-test", client=fake_client, max_image_length=64)

        with pytest.raises(FoodAnalysisError) as exc_info:
            await handler.analyze(AnalyzeFoodRequest(image="data:image/png;base64," + "A" * 64))

        assert exc_info.value.error_code == AnalysisErrorCode.TOO_LARGE
        assert exc_info.value.status_code == 400
        assert fake_client.calls == []

    async def test_text_reply_falls_back(self):
        client = FakeVisionClient(reply="Looks like a banana, about 105 calories.")
        handler = FoodAnalysisHandler(api_key="sk-test", client=client)

        response = await handler.analyze(AnalyzeFoodRequest(image="data:image/png;base64,AAAA"))

        assert response.name == "Looks like a banana, about 105 calories."
        assert response.calories == 300
        assert response.analysis == "Looks like a banana, about 105 calories."

    async def test_empty_reply_is_unknown_error(self):
        handler = FoodAnalysisHandler(api_key="sk-test", client=FakeVisionClient(reply=""))

        with pytest.raises(FoodAnalysisError) as exc_info:
            await handler.analyze(AnalyzeFoodRequest(image="data:image/png;base64,AAAA"))

        assert exc_info.value.status_code == 500
        assert exc_info.value.details == "No response from OpenAI"

    async def test_upstream_rate_limit(self):
        client = FakeVisionClient(error=RuntimeError("Error code: 429 - quota exceeded"))
        handler = FoodAnalysisHandler(api_key="sk-test", client=client)

        with pytest.raises(FoodAnalysisError) as exc_info:
            await handler.analyze(AnalyzeFoodRequest(image="data:image/png;base64,AAAA"))

        assert exc_info.value.error_code == AnalysisErrorCode.RATE_LIMITED
        assert exc_info.value.status_code == 429
        assert len(client.calls) == 1

    @pytest.mark.parametrize(
        "reply",
        [
            '{"name": "Lasagna", "calories": 1e999, "analysis": "Large tray"}',
            '{"name": "Lasagna", "calories": "inf", "analysis": "Large tray"}',
        ],
    )
    async def test_non_finite_calories_fall_back_to_default(self, reply):
        handler = FoodAnalysisHandler(api_key="sk-test", client=FakeVisionClient(reply=reply))

        response = await handler.analyze(AnalyzeFoodRequest(image="data:image/png;base64,AAAA"))

        assert response.success is True
        assert response.name == "Lasagna"
        assert response.calories == 300
