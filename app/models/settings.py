"""
Runtime settings for parsing, batching and scoring
"""
from pydantic import BaseModel, Field, field_validator, ValidationInfo


class LLMSettings(BaseModel):
    """Field-guessing LLM configuration"""
    model_name: str = Field(default="llama3", description="LLM model name")
    base_url: str = Field(default="http://localhost:11434", description="Ollama base URL")
    temperature: float = Field(default=0.1, ge=0.0, le=2.0, description="Generation temperature")
    timeout: int = Field(default=120, ge=1, le=600, description="Request timeout in seconds")
    rate_limit_attempts: int = Field(default=3, ge=1, le=10, description="Attempts when the LLM is rate limited")
    rate_limit_base_delay: float = Field(default=1.0, ge=0.0, le=60.0, description="Base backoff for rate limits")


class ProcessingSettings(BaseModel):
    """Batch processing configuration"""
    batch_size: int = Field(default=10, ge=1, le=100, description="Files parsed concurrently per chunk")
    batch_delay: float = Field(default=1.0, ge=0.0, le=60.0, description="Pause between chunks in seconds")
    retry_attempts: int = Field(default=3, ge=1, le=10, description="Attempts for the field-guessing call")
    retry_base_delay: float = Field(default=2.0, ge=0.0, le=60.0, description="First backoff delay in seconds")
    max_upload_files: int = Field(default=100, ge=1, description="Files accepted in one upload")
    max_jd_count: int = Field(default=10, ge=1, description="Job descriptions accepted per match")
    max_resume_count: int = Field(default=25, ge=1, description="Resumes accepted per match")


class ScoringThresholds(BaseModel):
    """Status classification thresholds (percentages)"""
    reject_max: int = Field(default=40, ge=0, le=100, description="At or below this a candidate is rejected")
    hold_max: int = Field(default=60, ge=0, le=100, description="At or below this a candidate is on hold")
    experience_grace_years: int = Field(default=2, ge=0, description="Shortfall still worth considering")

    @field_validator('hold_max')
    @classmethod
    def validate_thresholds(cls, v, info: ValidationInfo):
        reject_max = info.data.get('reject_max')
        if reject_max is not None and v <= reject_max:
            raise ValueError('hold_max must be greater than reject_max')
        return v


class Settings(BaseModel):
    """Complete service settings"""
    llm_settings: LLMSettings = Field(default_factory=LLMSettings)
    processing_settings: ProcessingSettings = Field(default_factory=ProcessingSettings)
    scoring_thresholds: ScoringThresholds = Field(default_factory=ScoringThresholds)
