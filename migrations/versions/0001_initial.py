"""
Create companies table.

Revision ID: 0001
Revises:
Create Date: 2024-03-01 00:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "companies",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("ticker", sa.String(length=20), nullable=False),
        sa.Column("name_vi", sa.Text(), nullable=True),
        sa.Column("name_en", sa.Text(), nullable=True),
        sa.Column("industry_activity", sa.Text(), nullable=True),
        sa.Column("bc_industry_group_id", sa.Integer(), nullable=True),
        sa.Column("bc_industry_group_slug", sa.String(length=100), nullable=True),
        sa.Column("bc_industry_group_code", sa.String(length=20), nullable=True),
        sa.Column("bc_industry_group_type", sa.String(length=20), nullable=True),
        sa.Column("bc_economic_sector_id", sa.Integer(), nullable=True),
        sa.Column("bc_economic_sector_slug", sa.String(length=100), nullable=True),
        sa.Column("bc_economic_sector_name", sa.String(length=100), nullable=True),
        sa.Column("stock_exchange", sa.String(length=10), nullable=True),
        sa.Column("security_type", sa.String(length=20), nullable=True),
        sa.Column("country", sa.String(length=5), nullable=True),
        sa.Column("website", sa.Text(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("main_service", sa.Text(), nullable=True),
        sa.Column("business_line", sa.Text(), nullable=True),
        sa.Column("business_strategy", sa.Text(), nullable=True),
        sa.Column("business_risk", sa.Text(), nullable=True),
        sa.Column("business_overall", sa.Text(), nullable=True),
        sa.Column("detail_info", sa.Text(), nullable=True),
        sa.Column("market_cap", sa.Float(), nullable=True),
        sa.Column("outstanding_shares_value", sa.Float(), nullable=True),
        sa.Column("price_close", sa.Float(), nullable=True),
        sa.Column("price_open", sa.Float(), nullable=True),
        sa.Column("price_high", sa.Float(), nullable=True),
        sa.Column("price_low", sa.Float(), nullable=True),
        sa.Column("price_floor", sa.Float(), nullable=True),
        sa.Column("price_ceiling", sa.Float(), nullable=True),
        sa.Column("price_reference", sa.Float(), nullable=True),
        sa.Column("net_change", sa.Float(), nullable=True),
        sa.Column("pct_change", sa.Float(), nullable=True),
        sa.Column("volume", sa.Float(), nullable=True),
        sa.Column("volume_10d_avg", sa.Float(), nullable=True),
        sa.Column("price_timestamp", sa.DateTime(), nullable=True),
        sa.Column("price_type", sa.Integer(), nullable=True),
        sa.Column("pe_ratio", sa.Float(), nullable=True),
        sa.Column("pb_ratio", sa.Float(), nullable=True),
        sa.Column("eps_ratio", sa.Float(), nullable=True),
        sa.Column("book_value", sa.Float(), nullable=True),
        sa.Column("roe", sa.Float(), nullable=True),
        sa.Column("roa", sa.Float(), nullable=True),
        sa.Column("free_float_rate", sa.Float(), nullable=True),
        sa.Column("beta_5y", sa.Float(), nullable=True),
        sa.Column("dividend_yield_current", sa.Float(), nullable=True),
        sa.Column("revenue_5y_growth", sa.Float(), nullable=True),
        sa.Column("net_income_5y_growth", sa.Float(), nullable=True),
        sa.Column("revenue_ltm_growth", sa.Float(), nullable=True),
        sa.Column("net_income_ltm_growth", sa.Float(), nullable=True),
        sa.Column("revenue_growth_qoq", sa.Float(), nullable=True),
        sa.Column("net_income_growth_qoq", sa.Float(), nullable=True),
        sa.Column("price_pct_chg_7d", sa.Float(), nullable=True),
        sa.Column("price_pct_chg_30d", sa.Float(), nullable=True),
        sa.Column("price_pct_chg_ytd", sa.Float(), nullable=True),
        sa.Column("price_pct_chg_1y", sa.Float(), nullable=True),
        sa.Column("price_pct_chg_3y", sa.Float(), nullable=True),
        sa.Column("price_pct_chg_5y", sa.Float(), nullable=True),
        sa.Column("valuation_point", sa.Integer(), nullable=True),
        sa.Column("growth_point", sa.Integer(), nullable=True),
        sa.Column("pass_performance_point", sa.Integer(), nullable=True),
        sa.Column("financial_health_point", sa.Integer(), nullable=True),
        sa.Column("dividend_point", sa.Integer(), nullable=True),
        sa.Column("company_quality", sa.Integer(), nullable=True),
        sa.Column("overall_risk_level", sa.String(length=20), nullable=True),
        sa.Column("quality_valuation", sa.String(length=10), nullable=True),
        sa.Column("ta_signal_1d", sa.String(length=20), nullable=True),
        sa.Column("watchlist_count", sa.Integer(), nullable=True),
        sa.Column("analysis_updated", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_companies")),
        sa.UniqueConstraint("ticker", name=op.f("uq_companies_ticker")),
    )
    op.create_index("idx_companies_ticker", "companies", ["ticker"])
    op.create_index("idx_companies_industry", "companies", ["bc_industry_group_slug"])
    op.create_index("idx_companies_sector", "companies", ["bc_economic_sector_slug"])
    op.create_index("idx_companies_exchange", "companies", ["stock_exchange"])


def downgrade() -> None:
    op.drop_index("idx_companies_exchange", table_name="companies")
    op.drop_index("idx_companies_sector", table_name="companies")
    op.drop_index("idx_companies_industry", table_name="companies")
    op.drop_index("idx_companies_ticker", table_name="companies")
    op.drop_table("companies")
