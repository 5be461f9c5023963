"""Compiled-in configuration document and defaults backfill.

The configuration document is a single JSON-like tree holding pricing
(``costs``), the point store catalog (``store``), the maintenance flag and
cosmetic content. Persisted documents may be partial or stale; every read
path merges them over DEFAULT_DOCUMENT so callers never observe a missing
key. Adding a new priced feature here makes it chargeable in every
deployment without migrating persisted documents.
"""

import copy
from collections.abc import Mapping
from typing import Any

Document = dict[str, Any]

DEFAULT_DOCUMENT: Document = {
    "costs": {
        "imageEdit": 2,
        "imageCreate": 5,
        "textToSpeech": 1,
        "dailyRewardPoints": 10,
        "referralBonus": 50,
        "imageEdit_noWatermark": 8,
        "imageCreate_noWatermark": 15,
        "contentRewrite": 1,
        "tweetGenerator": 1,
        "newUserPoints": 25,
    },
    "theme": {
        "logoUrl": "https://i.ibb.co/mH2WvTz/tomato-logo.png",
        "logoWidth": 150,
        "logoHeight": 50,
        "logoAlign": "left",
        "primaryColor": "#FF6B6B",
        "secondaryColor": "#2EC4B6",
        "navbarColor": "#FFFFFF",
        "navTextColor": "#2A323C",
        "buttonPadding": 8,
        "sliderHeight": 450,
        "navButtonFontSize": 16,
        "watermarkText": "tomatoai.net",
        "watermarkPosition": "bottom-right",
        "watermarkEffect": "shadow",
    },
    "store": {
        "packages": [
            {"id": 1, "points": 100, "price": 5},
            {"id": 2, "points": 550, "price": 25},
            {"id": 3, "points": 1200, "price": 50},
            {"id": 4, "points": 3000, "price": 100},
        ]
    },
    "announcement": {
        "enabled": False,
        "imageUrl": "",
        "contentEn": "Welcome to Tomato AI!",
        "contentAr": "مرحباً بك في Tomato AI!",
        "textColor": "#FFFFFF",
        "fontSize": 16,
    },
    "maintenance": {
        "enabled": False,
        "message_en": "We are currently down for maintenance. Please check back soon!",
        "message_ar": "الموقع حاليًا تحت الصيانة. يرجى العودة قريبًا!",
    },
    "content": {
        "siteNameAr": "Tomato AI",
        "siteNameEn": "Tomato AI",
        "slider": {
            "slide1": {
                "image": "https://i.ibb.co/V9Z2xN3/slide1.png",
                "title_ar": "إنشاء صور بالذكاء الاصطناعي",
                "title_en": "AI Image Generation",
                "text_ar": "حوّل كلماتك إلى صور مذهلة. أطلق العنان لإبداعك.",
                "text_en": "Turn your words into amazing images. Unleash your creativity.",
            },
            "slide2": {
                "image": "https://i.ibb.co/gZk8zM4/slide2.png",
                "title_ar": "تعديل احترافي للصور",
                "title_en": "Professional Image Editing",
                "text_ar": "صف التعديل الذي تريده، ودع الذكاء الاصطناعي يقوم بالباقي.",
                "text_en": "Describe the edit you want, and let the AI do the rest.",
            },
            "slide3": {
                "image": "https://i.ibb.co/c1xX6gQ/slide3.png",
                "title_ar": "تعليق صوتي فوري",
                "title_en": "Instant Voiceovers",
                "text_ar": "حوّل أي نص إلى تعليق صوتي طبيعي بلهجات متعددة.",
                "text_en": "Convert any text into a natural voiceover in multiple dialects.",
            },
        },
        "finalCta": {
            "title_ar": "هل أنت مستعد للبدء؟",
            "title_en": "Ready to Get Started?",
            "text_ar": "انضم إلى آلاف المبدعين الذين يستخدمون Tomato AI لإنشاء محتوى مذهل.",
            "text_en": "Join thousands of creators using Tomato AI to create amazing content.",
            "button_ar": "أنشئ حسابك المجاني",
            "button_en": "Create Your Free Account",
        },
    },
}


def default_document() -> Document:
    """Return a private deep copy of the compiled-in document."""
    return copy.deepcopy(DEFAULT_DOCUMENT)


def deep_merge(defaults: Mapping[str, Any], overrides: Mapping[str, Any]) -> Document:
    """Merge a persisted document over the defaults.

    Rules, applied per key:
    - key only in defaults: default value is injected (deep copy)
    - key only in overrides: kept as-is
    - both mappings: merged recursively
    - anything else: override wins wholesale (scalars and lists replace)

    Neither input is mutated.

    Args:
        defaults: Compiled-in default tree.
        overrides: Persisted tree whose leaves take precedence.

    Returns:
        New merged tree.
    """
    merged: Document = {}
    for key, default_value in defaults.items():
        if key not in overrides:
            merged[key] = copy.deepcopy(default_value)
            continue
        override_value = overrides[key]
        if isinstance(default_value, Mapping) and isinstance(override_value, Mapping):
            merged[key] = deep_merge(default_value, override_value)
        else:
            merged[key] = copy.deepcopy(override_value)

    for key, override_value in overrides.items():
        if key not in defaults:
            merged[key] = copy.deepcopy(override_value)

    return merged


def effective_document(persisted: Mapping[str, Any] | None) -> Document:
    """Backfill a persisted document with compiled-in defaults.

    Args:
        persisted: Stored document, or None when nothing is stored.

    Returns:
        Document containing every default key.
    """
    if persisted is None:
        return default_document()
    return deep_merge(DEFAULT_DOCUMENT, persisted)
