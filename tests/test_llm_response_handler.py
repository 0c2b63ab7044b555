"""Tests for parsing model replies into store results."""

import json

import pytest

from conftest import make_store_reply
from services.generation_errors import MalformedModelResponseError
from services.llm_response_handler import parse_generation_result, strip_code_fences
from services.store_schema import FontStyle, LayoutStyle


class TestStripCodeFences:
    def test_removes_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_removes_bare_fence(self):
        assert strip_code_fences('```\n{"a": 1}\n```\n') == '{"a": 1}'

    def test_keeps_backticks_inside_values(self):
        inner = '{"a": "use ```code``` here"}'
        assert strip_code_fences("```json\n" + inner + "\n```") == inner
        assert strip_code_fences(inner) == inner

    def test_leaves_plain_json_alone(self):
        assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'


class TestParseGenerationResult:
    def test_parses_well_formed_reply(self):
        result = parse_generation_result(json.dumps(make_store_reply()))

        assert result.store_name == "Acme"
        assert len(result.products) == 3
        assert result.customization.font == FontStyle.MODERN
        assert result.customization.layout == LayoutStyle.MINIMAL
        assert result.suggestions[0] == "Add customer reviews"

    def test_wire_form_matches_model_output(self):
        reply = make_store_reply()
        result = parse_generation_result(json.dumps(reply))

        assert result.to_wire() == reply

    def test_accepts_fenced_reply(self):
        fenced = "```json\n" + json.dumps(make_store_reply()) + "\n```"
        assert parse_generation_result(fenced).store_name == "Acme"

    def test_description_with_backticks_survives(self):
        reply = make_store_reply()
        reply["products"][0]["description"] = "Ships with ```setup``` notes"
        fenced = "```json\n" + json.dumps(reply) + "\n```"

        result = parse_generation_result(fenced)

        assert result.products[0].description == "Ships with ```setup``` notes"

    def test_keeps_optional_fields(self):
        reply = make_store_reply()
        reply["customization"]["paymentsEnabled"] = True
        reply["products"][0]["images"] = {"front": "https://cdn.example.com/front.png"}

        wire = parse_generation_result(json.dumps(reply)).to_wire()

        assert wire["customization"]["paymentsEnabled"] is True
        assert wire["products"][0]["images"] == {"front": "https://cdn.example.com/front.png"}

    def test_suggestions_default_to_empty(self):
        reply = make_store_reply()
        del reply["suggestions"]
        assert parse_generation_result(json.dumps(reply)).suggestions == []

    @pytest.mark.parametrize("content", [
        "Here is your store: a lovely boutique with three products.",
        "",
        None,
        "[1, 2, 3]",
        '{"storeName": "Acme"',
    ])
    def test_rejects_non_object_replies(self, content):
        with pytest.raises(MalformedModelResponseError) as exc:
            parse_generation_result(content)
        assert exc.value.status_code == 500

    def test_rejects_missing_products(self):
        reply = make_store_reply()
        del reply["products"]

        with pytest.raises(MalformedModelResponseError) as exc:
            parse_generation_result(json.dumps(reply))
        assert exc.value.details == "Invalid response structure"

    def test_rejects_products_that_are_not_a_list(self):
        reply = make_store_reply()
        reply["products"] = {"id": 1}

        with pytest.raises(MalformedModelResponseError):
            parse_generation_result(json.dumps(reply))

    def test_rejects_empty_product_list(self):
        reply = make_store_reply()
        reply["products"] = []

        with pytest.raises(MalformedModelResponseError):
            parse_generation_result(json.dumps(reply))

    @pytest.mark.parametrize("field,value", [
        ("price", -1),
        ("price", "12.00"),
        ("price", float("inf")),
        ("price", float("nan")),
        ("name", ""),
        ("description", ""),
        ("id", "one"),
    ])
    def test_rejects_invalid_product_fields(self, field, value):
        reply = make_store_reply()
        reply["products"][1][field] = value

        with pytest.raises(MalformedModelResponseError) as exc:
            parse_generation_result(json.dumps(reply))
        assert "products.1" in exc.value.details

    @pytest.mark.parametrize("field,value", [
        ("font", "gothic"),
        ("layout", "cluttered"),
        ("primaryColor", "blue"),
        ("accentColor", "#12345"),
    ])
    def test_rejects_customization_drift(self, field, value):
        reply = make_store_reply()
        reply["customization"][field] = value

        with pytest.raises(MalformedModelResponseError):
            parse_generation_result(json.dumps(reply))

    def test_zero_price_is_allowed(self):
        reply = make_store_reply()
        reply["products"][0]["price"] = 0

        assert parse_generation_result(json.dumps(reply)).products[0].price == 0
