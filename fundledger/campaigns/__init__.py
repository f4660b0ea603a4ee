"""Mini README: Fundraising campaigns ("special giving") for FundLedger.

The ``ledger`` module holds campaigns, their pledges and the derived progress
views consumed by the report engine.
"""

from .ledger import (
    Campaign,
    CampaignLedger,
    CampaignPledge,
    CampaignProgress,
    CampaignStats,
    CampaignStatus,
)

__all__ = [
    "Campaign",
    "CampaignLedger",
    "CampaignPledge",
    "CampaignProgress",
    "CampaignStats",
    "CampaignStatus",
]
