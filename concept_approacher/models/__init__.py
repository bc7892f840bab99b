from .concept import Concept, Feature, MatchResult, TrainingSample

__all__ = ["Concept", "Feature", "MatchResult", "TrainingSample"]
