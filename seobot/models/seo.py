from typing import Dict, List, Optional
from pydantic import BaseModel

class UrlRequest(BaseModel):
    url: Optional[str] = None

class SeoCheck(BaseModel):
    name: str
    status: str
    message: str
    category: Optional[str] = None

class Heading(BaseModel):
    tag: str
    text: str

class AnalyzeResult(BaseModel):
    url: str
    title: Optional[str]
    meta_description: Optional[str]
    h1_tags: List[str]
    checks: List[SeoCheck]

class AuditResult(AnalyzeResult):
    score: int
    load_time_ms: int
    content_length: int
    word_count: int
    image_count: int
    link_count: Dict[str, int]
    heading_structure: List[Heading]
