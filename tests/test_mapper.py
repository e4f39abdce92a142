"""Tests for parsing and validating model replies."""

import json

import pytest

from app.core.errors import EmptyResponseError, ResponseDecodeError, ResponseSchemaError
from app.core.models import TriageLevel
from app.services.mapper import parse_analysis_response


class TestParseAnalysisResponse:
    def test_valid_reply(self, reply_text, reply_dict):
        result = parse_analysis_response(reply_text)
        assert result.triage_level is TriageLevel.MEDIUM
        assert result.chief_complaint == reply_dict["chiefComplaint"]
        assert result.red_flags == reply_dict["redFlags"]
        assert result.health_radar.fatigue == 70
        assert result.soap.plan == reply_dict["soap"]["plan"]
        assert result.timeline_analysis == reply_dict["timelineAnalysis"]
        assert result.medicine_analysis is None

    @pytest.mark.parametrize("text", [None, "", "   \n"])
    def test_empty_reply(self, text):
        with pytest.raises(EmptyResponseError):
            parse_analysis_response(text)

    def test_not_json(self):
        with pytest.raises(ResponseDecodeError) as exc_info:
            parse_analysis_response("Sorry, I cannot help with that.")
        assert not isinstance(exc_info.value, ResponseSchemaError)

    def test_missing_required_field(self, reply_dict):
        del reply_dict["soap"]
        with pytest.raises(ResponseSchemaError, match="soap"):
            parse_analysis_response(json.dumps(reply_dict))

    def test_unknown_triage_level(self, reply_dict):
        reply_dict["triageLevel"] = "Urgent"
        with pytest.raises(ResponseSchemaError):
            parse_analysis_response(json.dumps(reply_dict))

    def test_radar_score_out_of_range(self, reply_dict):
        reply_dict["healthRadar"]["severity"] = 140
        with pytest.raises(ResponseSchemaError):
            parse_analysis_response(json.dumps(reply_dict))

    def test_no_coercion_of_wrong_types(self, reply_dict):
        reply_dict["healthRadar"]["stress"] = "40"
        with pytest.raises(ResponseSchemaError):
            parse_analysis_response(json.dumps(reply_dict))

    def test_unexpected_field(self, reply_dict):
        reply_dict["diagnosis"] = "Measles"
        with pytest.raises(ResponseSchemaError):
            parse_analysis_response(json.dumps(reply_dict))

    def test_optional_fields_may_be_absent(self, reply_dict):
        for key in ("timelineAnalysis", "voiceSummary", "visualObservations", "imageComparison", "medicineAnalysis"):
            reply_dict.pop(key)
        result = parse_analysis_response(json.dumps(reply_dict))
        assert result.timeline_analysis is None

    def test_blank_optional_normalised_to_none(self, reply_dict):
        reply_dict["visualObservations"] = "  "
        reply_dict["voiceSummary"] = ""
        result = parse_analysis_response(json.dumps(reply_dict))
        assert result.visual_observations is None
        assert result.voice_summary is None

    def test_empty_red_flags_allowed(self, reply_dict):
        reply_dict["redFlags"] = []
        assert parse_analysis_response(json.dumps(reply_dict)).red_flags == []
