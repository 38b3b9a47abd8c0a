"""Shape of the JSON document the AI model returns for a contract."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from contramind.models.enums import ComplianceStatus, DetectedLanguage, RiskScore


class KeyTerm(BaseModel):
    term: str
    definition: str = ""
    importance: str = ""


class ContractAnalysisResult(BaseModel):
    summary: str = ""
    risk_score: RiskScore = Field(alias="riskScore")
    risk_factors: list[str] = Field(default_factory=list, alias="riskFactors")
    sharia_compliance: ComplianceStatus = Field(alias="shariaCompliance")
    sharia_issues: list[str] = Field(default_factory=list, alias="shariaIssues")
    ksa_compliance: ComplianceStatus = Field(alias="ksaCompliance")
    ksa_issues: list[str] = Field(default_factory=list, alias="ksaIssues")
    key_terms: list[KeyTerm] = Field(default_factory=list, alias="keyTerms")
    recommendations: list[str] = Field(default_factory=list)
    detected_language: DetectedLanguage = Field(alias="detectedLanguage")

    model_config = ConfigDict(populate_by_name=True)
