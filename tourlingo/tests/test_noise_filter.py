import pytest

from tourlingo.filtering import NoiseFilter, filter_noise, is_likely_speech


class TestFilter:
    @pytest.mark.parametrize(
        "text, description",
        [
            ("[background noise]", "background noise"),
            ("(traffic)", "traffic"),
            ("*cough*", "cough"),
            ("  [music playing]  ", "music playing"),
        ],
    )
    def test_wholly_delimited_span_is_noise(self, text, description):
        result = filter_noise(text)
        assert result.is_noise is True
        assert result.filtered_text == ""
        assert result.noise_descriptions == [description]
        assert result.confidence == pytest.approx(0.9)

    def test_mixed_noise_and_speech_keeps_speech(self):
        result = filter_noise("[wind noise] Welcome to the island")
        assert result.is_noise is False
        assert result.filtered_text == "Welcome to the island"
        assert result.noise_descriptions == ["[wind noise]"]
        assert result.confidence == pytest.approx(0.8)

    def test_several_spans_are_stripped(self):
        result = filter_noise("On your left (crowd laughing) is the old *clears throat* lighthouse")
        assert result.filtered_text == "On your left is the old lighthouse"
        assert result.noise_descriptions == ["(crowd laughing)", "*clears throat*"]

    def test_inline_fillers_are_removed(self):
        result = filter_noise("um, the tower was built uh in 1850")
        assert result.filtered_text == "the tower was built in 1850"
        assert result.is_noise is False

    def test_bracketed_speech_without_noise_keyword_is_kept(self):
        result = filter_noise("The [north] gate opens at nine")
        assert result.filtered_text == "The [north] gate opens at nine"
        assert result.noise_descriptions == []

    @pytest.mark.parametrize("text", ["um", ".", "ok", "Hmm...", "", "   "])
    def test_nothing_meaningful_left_is_noise(self, text):
        result = filter_noise(text)
        assert result.is_noise is True
        assert result.filtered_text == ""

    def test_plain_speech_passes_untouched(self):
        result = NoiseFilter().filter("Please stay together on the bridge")
        assert result.is_noise is False
        assert result.filtered_text == "Please stay together on the bridge"
        assert result.confidence == 1.0


class TestIsLikelySpeech:
    @pytest.mark.parametrize("text", ["um", ".", "ok", "", "[background noise]", "Yes ok", "uhh hmm the"])
    def test_rejects_short_or_filler_text(self, text):
        assert is_likely_speech(text) is False

    @pytest.mark.parametrize("text", ["Hello there", "Can you see the dolphins", "Look at the lighthouse"])
    def test_accepts_real_sentences(self, text):
        assert is_likely_speech(text) is True

    def test_delimited_words_do_not_count(self):
        assert is_likely_speech("[laughs] (wind) Hello") is False
