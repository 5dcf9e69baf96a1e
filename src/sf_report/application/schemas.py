"""Pydantic schemas for the Financial Reporter."""

from pydantic import BaseModel

from src.sf_common.money import paise_to_display
from src.sf_loan.application.schemas import LoanResponse
from src.sf_report.domain.summary import FundStatus, ProjectFinancialSummary


class ProjectSummaryResponse(BaseModel):
    project_id: str
    project_name: str
    virtual_balance_paise: int
    virtual_balance_display: str
    advance_received_paise: int
    pending_dues_paise: int
    active_loans_given_paise: int
    active_loans_received_paise: int
    net_available_balance_paise: int
    net_available_balance_display: str
    total_payments_received_paise: int
    loans_given: list[LoanResponse]
    loans_received: list[LoanResponse]

    @classmethod
    def from_domain(cls, s: ProjectFinancialSummary) -> "ProjectSummaryResponse":
        return cls(
            project_id=s.project_id,
            project_name=s.project_name,
            virtual_balance_paise=s.virtual_balance,
            virtual_balance_display=paise_to_display(s.virtual_balance),
            advance_received_paise=s.advance_received,
            pending_dues_paise=s.pending_dues,
            active_loans_given_paise=s.active_loans_given,
            active_loans_received_paise=s.active_loans_received,
            net_available_balance_paise=s.net_available_balance,
            net_available_balance_display=paise_to_display(s.net_available_balance),
            total_payments_received_paise=s.total_payments_received,
            loans_given=[LoanResponse.from_domain(loan) for loan in s.loans_given],
            loans_received=[LoanResponse.from_domain(loan) for loan in s.loans_received],
        )


class FundStatusResponse(BaseModel):
    total_virtual_balance_paise: int
    total_virtual_balance_display: str
    total_active_loans_paise: int
    net_bank_balance_paise: int
    net_bank_balance_display: str
    is_balanced: bool
    project_summaries: list[ProjectSummaryResponse]

    @classmethod
    def from_domain(cls, status: FundStatus) -> "FundStatusResponse":
        return cls(
            total_virtual_balance_paise=status.total_virtual_balance,
            total_virtual_balance_display=paise_to_display(status.total_virtual_balance),
            total_active_loans_paise=status.total_active_loans,
            net_bank_balance_paise=status.net_bank_balance,
            net_bank_balance_display=paise_to_display(status.net_bank_balance),
            is_balanced=status.is_balanced,
            project_summaries=[ProjectSummaryResponse.from_domain(p) for p in status.projects],
        )


class InvariantReportResponse(BaseModel):
    ok: bool
    violations: list[str]
