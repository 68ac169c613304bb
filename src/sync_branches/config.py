"""
Configuration Management

시스템 설정 관리
"""

import os
import json
import yaml
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Mapping
from pathlib import Path
import logging
from logging.handlers import RotatingFileHandler

from pydantic import BaseModel, ValidationError, field_validator

from .actions import ActionsAnnotationHandler
from .errors import ConfigurationError
from .models.pull_request import RepositoryRef
from .models.run import RunConfig, MERGE_METHODS


# 액션 입력 이름 (action.yml 기준)
INPUT_NAMES = (
    "FROM_BRANCH",
    "TO_BRANCH",
    "GITHUB_TOKEN",
    "PULL_REQUEST_TITLE",
    "PULL_REQUEST_BODY",
    "PULL_REQUEST_AUTO_MERGE_METHOD",
    "PULL_REQUEST_IS_DRAFT",
    "CONTENT_COMPARISON",
    "REVIEWERS",
    "TEAM_REVIEWERS",
    "LABELS",
)


class ActionInputs(BaseModel):
    """액션 입력 원본 값 검증 모델"""
    from_branch: str
    to_branch: str
    github_token: str
    pull_request_title: Optional[str] = None
    pull_request_body: Optional[str] = None
    pull_request_auto_merge_method: Optional[str] = None
    pull_request_is_draft: bool = False
    content_comparison: bool = False
    reviewers: List[str] = []
    team_reviewers: List[str] = []
    labels: List[str] = []

    @field_validator('from_branch', 'to_branch', 'github_token', mode='before')
    @classmethod
    def validate_required(cls, v):
        if v is None or not str(v).strip():
            raise ValueError('Input required and not supplied')
        return str(v).strip()

    @field_validator('pull_request_title', 'pull_request_body', 'pull_request_auto_merge_method', mode='before')
    @classmethod
    def empty_as_none(cls, v):
        if v is None or not str(v).strip():
            return None
        return str(v).strip()

    @field_validator('pull_request_auto_merge_method')
    @classmethod
    def validate_merge_method(cls, v):
        if v is not None and v not in MERGE_METHODS:
            raise ValueError(f"must be one of {', '.join(sorted(MERGE_METHODS))}")
        return v

    @field_validator('pull_request_is_draft', 'content_comparison', mode='before')
    @classmethod
    def parse_flag(cls, v):
        # "true" (대소문자 무시)만 참
        if isinstance(v, bool):
            return v
        return str(v or '').strip().lower() == 'true'

    @field_validator('reviewers', 'team_reviewers', 'labels', mode='before')
    @classmethod
    def parse_json_list(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            if not v.strip():
                return []
            try:
                v = json.loads(v)
            except json.JSONDecodeError as e:
                raise ValueError(f"must be a JSON array of strings ({e.msg})")
        if not isinstance(v, list) or not all(isinstance(item, str) for item in v):
            raise ValueError("must be a JSON array of strings")
        return v

    @classmethod
    def load(cls, data: Mapping[str, Any]) -> "ActionInputs":
        """검증 실패를 ConfigurationError로 변환"""
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            problems = [
                f"{'.'.join(str(p) for p in err['loc']).upper()}: {err['msg']}"
                for err in e.errors()
            ]
            raise ConfigurationError(f"Invalid action inputs: {'; '.join(problems)}") from e

    def to_run_config(self) -> RunConfig:
        return RunConfig(
            from_branch=self.from_branch,
            to_branch=self.to_branch,
            github_token=self.github_token,
            title=self.pull_request_title,
            body=self.pull_request_body,
            auto_merge_method=self.pull_request_auto_merge_method,
            is_draft=self.pull_request_is_draft,
            content_comparison=self.content_comparison,
            reviewers=tuple(self.reviewers),
            team_reviewers=tuple(self.team_reviewers),
            labels=tuple(self.labels),
        )


def read_action_inputs(environ: Mapping[str, str]) -> Dict[str, Optional[str]]:
    """INPUT_<NAME> 우선, 없으면 <NAME> 환경 변수 사용"""
    values = {}
    for name in INPUT_NAMES:
        value = environ.get(f"INPUT_{name}")
        if value is None:
            value = environ.get(name)
        values[name.lower()] = value
    return values


@dataclass
class GitHubConfig:
    """GitHub API 설정"""
    token: Optional[str] = field(default=None, repr=False)
    api_base_url: str = "https://api.github.com"
    repository: Optional[str] = None
    timeout_seconds: int = 30
    max_retries: int = 3


@dataclass
class LoggingConfig:
    """로깅 설정"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    annotations: bool = False


@dataclass
class AppConfig:
    """전체 애플리케이션 설정"""
    sync: RunConfig
    github: GitHubConfig
    logging: LoggingConfig
    debug: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """환경 변수(액션 입력)에서 설정 로드"""
        env = os.environ if environ is None else environ
        sync = ActionInputs.load(read_action_inputs(env)).to_run_config()

        return cls(
            sync=sync,
            github=GitHubConfig(
                token=sync.github_token,
                api_base_url=env.get("GITHUB_API_URL") or "https://api.github.com",
                repository=env.get("GITHUB_REPOSITORY"),
                timeout_seconds=int(env.get("GITHUB_TIMEOUT", "30")),
                max_retries=int(env.get("GITHUB_MAX_RETRIES", "3")),
            ),
            logging=LoggingConfig(
                level=env.get("LOG_LEVEL", "INFO"),
                format=env.get("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
                file_path=env.get("LOG_FILE"),
                max_file_size=int(env.get("LOG_MAX_SIZE", str(10 * 1024 * 1024))),
                backup_count=int(env.get("LOG_BACKUP_COUNT", "5")),
                annotations=env.get("GITHUB_ACTIONS", "false").lower() == "true",
            ),
            debug=env.get("RUNNER_DEBUG", "0") == "1",
        )

    @classmethod
    def from_yaml(cls, config_path: str, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """YAML 파일에서 설정 로드"""
        env = os.environ if environ is None else environ
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        github_data = dict(config_data.get('github', {}))
        sync_data = dict(config_data.get('sync', {}))

        # 토큰은 파일보다 환경 변수를 권장
        token = sync_data.get('github_token') or github_data.get('token') or env.get("GITHUB_TOKEN")
        sync_data['github_token'] = token
        github_data['token'] = token
        github_data.setdefault('repository', env.get("GITHUB_REPOSITORY"))

        return cls(
            sync=ActionInputs.load(sync_data).to_run_config(),
            github=GitHubConfig(**github_data),
            logging=LoggingConfig(**config_data.get('logging', {})),
            debug=config_data.get('debug', False),
        )

    @property
    def repository_ref(self) -> RepositoryRef:
        try:
            return RepositoryRef.parse(self.github.repository or '')
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    def validate(self) -> None:
        """설정 유효성 검사"""
        errors = []

        # 저장소 형식 확인
        if not self.github.repository:
            errors.append("GITHUB_REPOSITORY is required")
        else:
            try:
                RepositoryRef.parse(self.github.repository)
            except ValueError as e:
                errors.append(str(e))

        if self.github.timeout_seconds <= 0:
            errors.append("GitHub timeout must be positive")

        if self.github.max_retries < 0:
            errors.append("GitHub max retries must be non-negative")

        # 로그 레벨 검증
        valid_log_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if self.logging.level.upper() not in valid_log_levels:
            errors.append(f"Invalid log level: {self.logging.level}")

        if errors:
            raise ConfigurationError(f"Configuration validation failed: {'; '.join(errors)}")


def setup_logging(config: LoggingConfig, debug: bool = False) -> None:
    """로깅 설정"""
    level = logging.DEBUG if debug else getattr(logging, config.level.upper())
    logging.basicConfig(level=level, format=config.format)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # 파일 로깅이 설정된 경우 로테이션 설정
    if config.file_path:
        handler = RotatingFileHandler(
            config.file_path,
            maxBytes=config.max_file_size,
            backupCount=config.backup_count,
        )
        handler.setFormatter(logging.Formatter(config.format))
        root_logger.addHandler(handler)

    # GitHub Actions 실행 시 경고/에러를 워크플로 주석으로 출력
    if config.annotations and not any(isinstance(h, ActionsAnnotationHandler) for h in root_logger.handlers):
        root_logger.addHandler(ActionsAnnotationHandler())
