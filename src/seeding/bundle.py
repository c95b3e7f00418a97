"""The heritage site content bundle and its content transforms.

DEFAULT_BUNDLE is seeded in declaration order: site configuration,
navigation and footer, page content, heritage and other domain
collections, then demo data.
"""

from __future__ import annotations

from typing import Any, Mapping

from .batch import isoformat, utc_now
from .errors import SourceLoadError
from .loader import BundleEntry
from .models import UnitKind

SEED_CONFIGURATION_FILE = "seed-configuration-refined.json"
LANDING_PAGE_FILE = "landing-page-content.json"
HERITAGE_SPOTS_FILE = "heritage-spots-refined.json"
DOCUMENTS_FILE = "documents-refined.json"
MINI_GAMES_FILE = "mini-games-refined.json"
VR_CONTENT_FILE = "vr-content-refined.json"
NAVIGATION_FILE = "navigation.json"
FOOTER_FILE = "footer.json"

FEATURED_GAME_COUNT = 3

DIFFICULTY_LABELS = {
    "easy": "Dễ",
    "medium": "Trung bình",
    "hard": "Khó",
}

GAME_ICONS = {
    "timeline_quiz": "Clock",
    "multiple_choice_quiz": "Target",
    "jigsaw_puzzle": "Zap",
    "matching_game": "Target",
    "exploration_game": "Compass",
    "sorting_game": "Trophy",
}

GAME_COLORS = {
    "timeline_quiz": "from-blue-500 to-purple-600",
    "multiple_choice_quiz": "from-green-500 to-blue-600",
    "jigsaw_puzzle": "from-purple-500 to-pink-600",
    "matching_game": "from-red-500 to-orange-600",
    "exploration_game": "from-yellow-500 to-red-600",
    "sorting_game": "from-indigo-500 to-purple-600",
}

DEFAULT_GAME_ICON = "Target"
DEFAULT_GAME_COLOR = "from-blue-500 to-purple-600"
DEFAULT_GAME_REWARDS = {"points": 10, "badges": [], "unlocks": []}

DEFAULT_HERO_ACTION = {"text": "Khám phá ngay", "targetSection": "introduction"}
DEFAULT_HERO_BACKGROUND = {
    "enableFlags": True,
    "enableStars": True,
    "enableDecorations": True,
}
DEFAULT_INTRO_VIDEO = "Video/testvideo.mp4"


def _require_mapping(section: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(section, Mapping):
        raise SourceLoadError(f"{what}: expected an object, got {type(section).__name__}")
    return section


def hero_content(section: Any) -> dict[str, Any]:
    """Fill in hero defaults missing from the landing page's heroSection."""
    hero = dict(_require_mapping(section, "heroSection"))
    hero["actionButton"] = hero.get("actionButton") or dict(DEFAULT_HERO_ACTION)
    hero["backgroundElements"] = hero.get("backgroundElements") or dict(DEFAULT_HERO_BACKGROUND)
    hero["isActive"] = True
    return hero


def introduction_content(section: Any) -> dict[str, Any]:
    """Map introductionSection highlights onto the features list the site reads."""
    intro = dict(_require_mapping(section, "introductionSection"))
    intro["features"] = intro.get("highlights") or []
    intro["videoPath"] = intro.get("videoPath") or DEFAULT_INTRO_VIDEO
    intro["isActive"] = True
    return intro


def normalize_game(game: Any, index: int) -> dict[str, Any]:
    """Convert one mini game from the authoring format to the stored format."""
    game = _require_mapping(game, f"mini game #{index}")
    game_type = game.get("gameType")
    difficulty = game.get("difficulty")
    # Lookups only for string values; anything else falls back to defaults
    type_key = game_type if isinstance(game_type, str) else None
    if not isinstance(difficulty, str):
        difficulty = None

    return {
        "id": game.get("id"),
        "title": game.get("title"),
        "description": game.get("description"),
        "gameType": game_type,
        "difficulty": DIFFICULTY_LABELS.get(difficulty) or difficulty or DIFFICULTY_LABELS["easy"],
        "estimatedTime": game.get("estimatedTime"),
        "category": game.get("category") or "history",
        "icon": GAME_ICONS.get(type_key) or game.get("icon") or DEFAULT_GAME_ICON,
        "color": GAME_COLORS.get(type_key) or game.get("color") or DEFAULT_GAME_COLOR,
        "tags": game.get("tags") or [],
        "players": game.get("players") or 0,
        "maxScore": game.get("maxScore"),
        "isActive": True,
        "isFeatured": index < FEATURED_GAME_COUNT,
        "order": index + 1,
        "gameData": game.get("gameData"),
        "rewards": game.get("rewards") or dict(DEFAULT_GAME_REWARDS),
    }


def mini_games(section: Any) -> list[dict[str, Any]]:
    if not isinstance(section, list):
        raise SourceLoadError(f"mini games: expected a list, got {type(section).__name__}")
    return [normalize_game(game, index) for index, game in enumerate(section)]


def as_record_list(section: Any) -> list[Any]:
    """Treat a single-object file as a one-record collection."""
    return section if isinstance(section, list) else [section]


def demo_user_progress() -> dict[str, Any]:
    return {
        "userId": "demo-user-1",
        "visitedSpots": ["kim-lien-heritage-site"],
        "completedQuizzes": [],
        "totalPoints": 0,
        "achievements": [],
        "lastActivity": isoformat(utc_now()),
    }


def demo_app_settings() -> dict[str, Any]:
    return {
        "version": "1.0.0",
        "maintenanceMode": False,
        "featuredSpots": [
            "kim-lien-heritage-site",
            "pac-bo-heritage-site",
            "ben-nha-rong-ho-chi-minh-museum",
        ],
        "announcements": [
            {
                "id": "welcome",
                "title": "Chào mừng đến với Hành trình theo dấu chân Bác",
                "message": "Khám phá cuộc đời và sự nghiệp vĩ đại của Chủ tịch Hồ Chí Minh",
                "type": "info",
                "isActive": True,
            }
        ],
    }


DEFAULT_BUNDLE: tuple[BundleEntry, ...] = (
    BundleEntry(
        kind=UnitKind.DOCUMENT,
        collection="siteConfig",
        document_id="main",
        file=SEED_CONFIGURATION_FILE,
        static_data="siteConfig",
        label="Site Configuration",
        required=False,
    ),
    BundleEntry(
        kind=UnitKind.DOCUMENT,
        collection="navigationContent",
        document_id="main-navigation",
        file=SEED_CONFIGURATION_FILE,
        static_data="navigationContent",
        label="Navigation Content",
        required=False,
    ),
    BundleEntry(
        kind=UnitKind.DOCUMENT,
        collection="footerContent",
        document_id="main-footer",
        file=SEED_CONFIGURATION_FILE,
        static_data="footerContent",
        label="Footer Content",
        required=False,
    ),
    BundleEntry(
        kind=UnitKind.DOCUMENT,
        collection="heroContent",
        document_id="main-hero",
        file=LANDING_PAGE_FILE,
        key="heroSection",
        label="Hero Content",
        group="pageContent",
        transform=hero_content,
        required=False,
    ),
    BundleEntry(
        kind=UnitKind.DOCUMENT,
        collection="introductionContent",
        document_id="main-intro",
        file=LANDING_PAGE_FILE,
        key="introductionSection",
        label="Introduction Content",
        group="pageContent",
        transform=introduction_content,
        required=False,
    ),
    BundleEntry(
        kind=UnitKind.DOCUMENT,
        collection="pageContent",
        document_id="landing-page",
        file=LANDING_PAGE_FILE,
        label="Landing Page Content",
    ),
    BundleEntry(
        kind=UnitKind.COLLECTION,
        collection="heritage-spots",
        file=HERITAGE_SPOTS_FILE,
        label="Heritage Spots",
    ),
    BundleEntry(
        kind=UnitKind.COLLECTION,
        collection="document-categories",
        file=DOCUMENTS_FILE,
        key="categories",
        label="Document Categories",
        group="documents",
        required=False,
    ),
    BundleEntry(
        kind=UnitKind.COLLECTION,
        collection="documents",
        file=DOCUMENTS_FILE,
        key="documents",
        label="Documents",
        group="documents",
        required=False,
    ),
    BundleEntry(
        kind=UnitKind.COLLECTION,
        collection="mini-games",
        file=MINI_GAMES_FILE,
        key="games",
        label="Mini Games",
        transform=mini_games,
    ),
    BundleEntry(
        kind=UnitKind.COLLECTION,
        collection="vr-experiences",
        file=VR_CONTENT_FILE,
        key="vrExperiences",
        label="VR Experiences",
        group="vr-content",
        required=False,
    ),
    BundleEntry(
        kind=UnitKind.COLLECTION,
        collection="vr-collections",
        file=VR_CONTENT_FILE,
        key="vrCollections",
        label="VR Collections",
        group="vr-content",
        required=False,
    ),
    BundleEntry(
        kind=UnitKind.DOCUMENT,
        collection="app-settings",
        document_id="vr-settings",
        file=VR_CONTENT_FILE,
        key="vrSettings",
        label="VR Settings",
        group="vr-content",
        required=False,
    ),
)

DEMO_BUNDLE: tuple[BundleEntry, ...] = (
    BundleEntry(
        kind=UnitKind.DOCUMENT,
        collection="user-progress",
        document_id="demo-user-1",
        label="Demo User Progress",
        group="demo",
        factory=demo_user_progress,
    ),
    BundleEntry(
        kind=UnitKind.DOCUMENT,
        collection="app-settings",
        document_id="main",
        label="App Settings",
        group="demo",
        factory=demo_app_settings,
    ),
)

# Named single-collection entries for targeted reseeding
SINGLE_COLLECTIONS: dict[str, BundleEntry] = {
    "mini-games": BundleEntry(
        kind=UnitKind.COLLECTION,
        collection="mini-games",
        file=MINI_GAMES_FILE,
        key="games",
        transform=mini_games,
    ),
    "heritage-spots": BundleEntry(
        kind=UnitKind.COLLECTION,
        collection="heritage-spots",
        file=HERITAGE_SPOTS_FILE,
        key="heritageSpots",
    ),
    "documents": BundleEntry(
        kind=UnitKind.COLLECTION,
        collection="documents",
        file=DOCUMENTS_FILE,
        key="documents",
    ),
    "document-categories": BundleEntry(
        kind=UnitKind.COLLECTION,
        collection="document-categories",
        file=DOCUMENTS_FILE,
        key="categories",
    ),
    "vr-experiences": BundleEntry(
        kind=UnitKind.COLLECTION,
        collection="vr-experiences",
        file=VR_CONTENT_FILE,
        key="vrExperiences",
    ),
    "vr-featured": BundleEntry(
        kind=UnitKind.COLLECTION,
        collection="vr-featured",
        file=VR_CONTENT_FILE,
        key="vrFeatured",
    ),
    "site-config": BundleEntry(
        kind=UnitKind.COLLECTION,
        collection="heroContent",
        file=LANDING_PAGE_FILE,
        key="heroSection",
        transform=lambda section: as_record_list(hero_content(section)),
    ),
    "navigation": BundleEntry(
        kind=UnitKind.COLLECTION,
        collection="navigation",
        file=NAVIGATION_FILE,
        transform=as_record_list,
    ),
    "footer": BundleEntry(
        kind=UnitKind.COLLECTION,
        collection="footer",
        file=FOOTER_FILE,
        transform=as_record_list,
    ),
}


def bundle_entries(include_demo: bool = False) -> tuple[BundleEntry, ...]:
    """The default bundle, optionally followed by demo data."""
    if include_demo:
        return DEFAULT_BUNDLE + DEMO_BUNDLE
    return DEFAULT_BUNDLE
