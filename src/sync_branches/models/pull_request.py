"""
Pull Request Data Models

풀 리퀘스트와 저장소 관련 데이터 모델들
"""

from dataclasses import dataclass
from typing import Dict, List, Optional
from pydantic import BaseModel, field_validator


@dataclass(frozen=True)
class RepositoryRef:
    """owner/repo 저장소 식별자"""
    owner: str
    name: str

    def __post_init__(self):
        """데이터 검증"""
        if not self.owner or not self.name:
            raise ValueError("Repository owner and name must be non-empty")
        if '/' in self.owner or '/' in self.name:
            raise ValueError("Repository owner and name must not contain '/'")

    @classmethod
    def parse(cls, full_name: str) -> "RepositoryRef":
        """'owner/repo' 문자열 파싱"""
        parts = (full_name or '').strip().split('/')
        if len(parts) != 2:
            raise ValueError(f"Repository must be in format 'owner/repo', got {full_name!r}")
        return cls(owner=parts[0], name=parts[1])

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name


@dataclass
class PullRequest:
    """열려 있거나 새로 생성된 풀 리퀘스트"""
    number: int
    html_url: str
    head_ref: str
    base_ref: str
    url: str = ""
    draft: bool = False
    merged: bool = False

    def __post_init__(self):
        """데이터 검증"""
        if self.number <= 0:
            raise ValueError("PR number must be positive")

    @classmethod
    def from_api(cls, data: Dict) -> "PullRequest":
        """GitHub API 응답에서 생성"""
        payload = PullRequestPayload.model_validate(data)
        return cls(
            number=payload.number,
            html_url=payload.html_url,
            head_ref=payload.head.ref,
            base_ref=payload.base.ref,
            url=payload.url,
            draft=payload.draft,
            merged=payload.merged,
        )

    def matches(self, head: str, base: str) -> bool:
        """head/base 브랜치 쌍이 정확히 일치하는지 확인"""
        return self.head_ref == head and self.base_ref == base


# Pydantic models for API response validation
class BranchRefPayload(BaseModel):
    """API 응답의 head/base 브랜치"""
    ref: str


class PullRequestPayload(BaseModel):
    """API 응답용 PullRequest 모델"""
    number: int
    html_url: str
    url: str = ""
    head: BranchRefPayload
    base: BranchRefPayload
    draft: bool = False
    merged: bool = False

    @field_validator('number')
    @classmethod
    def validate_number(cls, v):
        if v <= 0:
            raise ValueError('PR number must be positive')
        return v

    @field_validator('draft', 'merged', mode='before')
    @classmethod
    def none_as_false(cls, v):
        return bool(v) if v is not None else False


class ComparisonPayload(BaseModel):
    """API 응답용 브랜치 비교 모델"""
    status: Optional[str] = None
    ahead_by: int = 0
    files: List[Dict] = []

    @field_validator('files', mode='before')
    @classmethod
    def none_as_empty(cls, v):
        return v or []

    @property
    def has_changed_files(self) -> bool:
        return len(self.files) > 0
