import json

import pytest

from tourlingo.models import Participant, ParticipantMetadata, Role


class TestParticipantMetadata:
    def test_role_field(self):
        meta = ParticipantMetadata.parse('{"language": "ja", "role": "guide", "displayName": "Kenji"}')
        assert meta == ParticipantMetadata(language="ja", role=Role.GUIDE, display_name="Kenji")

    def test_operator_flag_means_guide(self):
        assert ParticipantMetadata.parse({"language": "de", "isOperator": True}).role is Role.GUIDE
        assert ParticipantMetadata.parse({"language": "de", "isOperator": False}).role is Role.GUEST

    @pytest.mark.parametrize("raw", [None, "", b"", "{not json", "[]", "42", {"language": 7}])
    def test_absent_or_malformed_falls_back_to_english_guest(self, raw):
        meta = ParticipantMetadata.parse(raw)
        assert meta.language == "en"
        assert meta.role is Role.GUEST

    def test_to_json_round_trips(self):
        meta = ParticipantMetadata(language="fr", role=Role.GUIDE, display_name="Marie")
        assert json.loads(meta.to_json()) == {"language": "fr", "role": "guide", "displayName": "Marie"}
        assert ParticipantMetadata.parse(meta.to_json()) == meta


class TestParticipant:
    def test_from_metadata(self):
        guide = Participant.from_metadata("p-1", "Ana", '{"language": "es", "role": "guide"}')
        assert guide.is_guide
        assert guide.language == "es"
        assert guide.display_name == "Ana"

    def test_name_falls_back_to_metadata_then_identity(self):
        assert Participant.from_metadata("p-2", None, {"displayName": "Yuki"}).display_name == "Yuki"
        assert Participant.from_metadata("p-3", "", None).display_name == "p-3"
