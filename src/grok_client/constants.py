"""Static endpoint and feature tables for the Grok API."""

from __future__ import annotations

from types import MappingProxyType
from typing import Final, Mapping

# Public bearer token used by the x.com web client.
GUEST_BEARER_TOKEN: Final[str] = (
    "AAAAAAAAAAAAAAAAAAAAANRILgAAAAAAnNwIzUejRCOuH5E6I8xnZz4puTs"
    "%3D1Zv7ttfk8LF81IUq16cHjhLTvJu4FA33AGWWjCpTnA"
)


class Endpoint:
    CREATE_GROK_CONVERSATION: Final[str] = (
        "https://x.com/i/api/graphql/vvC5uy7pWWHXS2aDi1FZeA/CreateGrokConversation"
    )
    GROK_CONVERSATION_ITEMS_BY_REST_ID: Final[str] = (
        "https://x.com/i/api/graphql/nuCH8TfQbItLdaiNCCfQ_Q/GrokConversationItemsByRestId"
    )
    GROK_ATTACHMENT: Final[str] = "https://x.com/i/api/2/grok/attachment.json"
    GROK_ADD_RESPONSE: Final[str] = "https://grok.x.com/2/grok/add_response.json"


GROK_CONVERSATION_ITEMS_FEATURES: Final[Mapping[str, bool]] = MappingProxyType(
    {
        "creator_subscriptions_tweet_preview_api_enabled": True,
        "premium_content_api_read_enabled": False,
        "communities_web_enable_tweet_community_results_fetch": True,
        "c9s_tweet_anatomy_moderator_badge_enabled": True,
        "responsive_web_grok_analyze_button_fetch_trends_enabled": False,
        "responsive_web_grok_analyze_post_followups_enabled": True,
        "responsive_web_grok_share_attachment_enabled": True,
        "articles_preview_enabled": True,
        "responsive_web_edit_tweet_api_enabled": True,
        "graphql_is_translatable_rweb_tweet_is_translatable_enabled": True,
        "view_counts_everywhere_api_enabled": True,
        "longform_notetweets_consumption_enabled": True,
        "responsive_web_twitter_article_tweet_consumption_enabled": True,
        "tweet_awards_web_tipping_enabled": False,
        "creator_subscriptions_quote_tweet_preview_enabled": False,
        "freedom_of_speech_not_reach_fetch_enabled": True,
        "standardized_nudges_misinfo": True,
        "tweet_with_visibility_results_prefer_gql_limited_actions_policy_enabled": True,
        "rweb_video_timestamps_enabled": True,
        "longform_notetweets_rich_text_read_enabled": True,
        "longform_notetweets_inline_media_enabled": True,
        "profile_label_improvements_pcf_label_in_post_enabled": False,
        "rweb_tipjar_consumption_enabled": True,
        "responsive_web_graphql_exclude_directive_enabled": True,
        "verified_phone_label_enabled": False,
        "responsive_web_graphql_skip_user_profile_image_extensions_enabled": False,
        "responsive_web_graphql_timeline_navigation_enabled": True,
        "responsive_web_enhance_cards_enabled": False,
    }
)

DEFAULT_MODEL: Final[str] = "grok-2a"
DEFAULT_IMAGE_GENERATION_COUNT: Final[int] = 4

__all__ = [
    "DEFAULT_IMAGE_GENERATION_COUNT",
    "DEFAULT_MODEL",
    "Endpoint",
    "GROK_CONVERSATION_ITEMS_FEATURES",
    "GUEST_BEARER_TOKEN",
]
