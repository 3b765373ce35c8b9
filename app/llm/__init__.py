from app.llm.extractor import SurveyLlmExtractor
from app.llm.factory import LlmExtractorFactory

__all__ = ["LlmExtractorFactory", "SurveyLlmExtractor"]
