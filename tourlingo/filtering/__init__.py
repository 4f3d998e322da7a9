from .noise_filter import NoiseFilter, NoiseFilterResult, filter_noise, is_likely_speech

__all__ = ["NoiseFilter", "NoiseFilterResult", "filter_noise", "is_likely_speech"]
