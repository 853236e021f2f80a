from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

class OutlineRequest(BaseModel):
    keyword: Optional[str] = None
    language: str = "en"

class OutlineSection(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tag: str = "h2"
    text: str
    points: List[str] = []
    suggested_word_count: int = Field(0, alias="suggestedWordCount")

class ArticleRequest(BaseModel):
    keyword: Optional[str] = None
    title: Optional[str] = None
    outline: Optional[List[OutlineSection]] = None
    language: str = "en"

class ScoreCheck(BaseModel):
    name: str
    status: str
    detail: str

class SeoScore(BaseModel):
    overall: int
    checks: List[ScoreCheck]

class ArticleResult(BaseModel):
    article: str
    score: SeoScore
