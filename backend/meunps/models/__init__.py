from meunps.models.user import User
from meunps.models.taxonomy import Source, Situation, Group
from meunps.models.campaign import Campaign, CampaignForm
from meunps.models.nps_response import NpsResponse
from meunps.models.contact import Contact
from meunps.models.user_profile import UserProfile
from meunps.models.app_config import AppConfig
from meunps.models.affiliate import UserAffiliate, AffiliateReferral, COMMISSION_STATUSES
from meunps.models.user_admin import UserAdmin

__all__ = [
    "User",
    "Source",
    "Situation",
    "Group",
    "Campaign",
    "CampaignForm",
    "NpsResponse",
    "Contact",
    "UserProfile",
    "AppConfig",
    "UserAffiliate",
    "AffiliateReferral",
    "COMMISSION_STATUSES",
    "UserAdmin",
]
