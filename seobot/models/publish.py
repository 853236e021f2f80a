from typing import List, Optional
from pydantic import BaseModel

class DevtoRequest(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    tags: List[str] = []
    api_key: Optional[str] = None
    published: bool = False

class WordPressRequest(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    site_url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    status: str = "draft"

class TweetRequest(BaseModel):
    text: Optional[str] = None

class MarkdownRequest(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    output_dir: Optional[str] = None
