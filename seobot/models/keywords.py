from typing import List, Optional
from pydantic import BaseModel

class KeywordRequest(BaseModel):
    seed: Optional[str] = None
    depth: Optional[int] = None

class KeywordCluster(BaseModel):
    label: str
    keywords: List[str]

class KeywordResult(BaseModel):
    seed: str
    all_keywords: List[str]
    clusters: List[KeywordCluster]
