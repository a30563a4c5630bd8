"""
models/category.py
------------------
Display descriptors for subscription categories.
Presentation code looks categories up here instead of branching per case.
"""

from dataclasses import dataclass

from models.subscription import SubscriptionCategory


@dataclass(frozen=True)
class CategoryStyle:
    """How a category is shown: human label, emoji icon and chart color."""
    label: str
    icon: str
    color: str


CATEGORY_STYLES: dict[SubscriptionCategory, CategoryStyle] = {
    SubscriptionCategory.STREAMING: CategoryStyle("Streaming", "📺", "#FF6B6B"),
    SubscriptionCategory.MUSIC: CategoryStyle("Music", "🎵", "#4ECDC4"),
    SubscriptionCategory.PRODUCTIVITY: CategoryStyle("Productivity", "💼", "#BB8FCE"),
    SubscriptionCategory.GAMING: CategoryStyle("Gaming", "🎮", "#45B7D1"),
    SubscriptionCategory.NEWS: CategoryStyle("News", "📰", "#F7DC6F"),
    SubscriptionCategory.FITNESS: CategoryStyle("Fitness", "🏋️", "#82E0AA"),
    SubscriptionCategory.EDUCATION: CategoryStyle("Education", "🎓", "#F8C471"),
    SubscriptionCategory.CLOUD: CategoryStyle("Cloud", "☁️", "#85C1E9"),
    SubscriptionCategory.UTILITIES: CategoryStyle("Utilities", "🔌", "#F1948A"),
    SubscriptionCategory.OTHER: CategoryStyle("Other", "📦", "#AED6F1"),
}


def style_for(category: SubscriptionCategory) -> CategoryStyle:
    """Return the display descriptor for a category."""
    return CATEGORY_STYLES[category]
