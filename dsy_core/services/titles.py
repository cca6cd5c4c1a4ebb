"""
Project titles - short keyword titles derived from prompts, no AI involved.

    generate_project_title("Create a dark portfolio website with a hero")
    -> "Hero_Portfolio_Dark"
"""

import random
import re
from typing import List, Optional

STOP_WORDS = frozenset("""
    a an the and or but is are was were be been being have has had do does did
    will would could should may might must can to of in for on with at by from
    as into through during before after above below between under again further
    then once here there when where why how all each few more most other some
    such no nor not only own same so than too very just also now that this these
    those what which who whom it its i me my we our you your he him his she her
    they them their create build make design generate add use using want need
    like please help show give get put take website webpage page site web html
    css code style styles section component element include including based
    inspired similar something thing things way look looks looking feel feels
    really actually basically simple complex good great nice cool awesome
    amazing beautiful
""".split())

# Words that say what kind of project it is; they lead the title
TYPE_KEYWORDS = {
    "portfolio": "Portfolio", "landing": "Landing", "dashboard": "Dashboard",
    "ecommerce": "Ecommerce", "e-commerce": "Ecommerce", "shop": "Shop",
    "store": "Store", "blog": "Blog", "gallery": "Gallery", "contact": "Contact",
    "about": "About", "pricing": "Pricing", "login": "Login", "signup": "Signup",
    "register": "Register", "profile": "Profile", "settings": "Settings",
    "hero": "Hero", "navbar": "Navbar", "footer": "Footer", "sidebar": "Sidebar",
    "modal": "Modal", "form": "Form", "card": "Card", "cards": "Cards",
    "testimonial": "Testimonial", "testimonials": "Testimonials",
    "features": "Features", "services": "Services", "team": "Team", "faq": "FAQ",
    "newsletter": "Newsletter", "checkout": "Checkout", "cart": "Cart",
    "product": "Product", "products": "Products", "social": "Social",
    "dark": "Dark", "light": "Light", "modern": "Modern", "minimal": "Minimal",
    "glassmorphism": "Glass", "neumorphism": "Neumorph", "gradient": "Gradient",
    "animated": "Animated", "responsive": "Responsive", "mobile": "Mobile",
    "app": "App", "saas": "SaaS", "startup": "Startup", "agency": "Agency",
    "restaurant": "Restaurant", "food": "Food", "fitness": "Fitness", "gym": "Gym",
    "music": "Music", "video": "Video", "travel": "Travel", "hotel": "Hotel",
    "booking": "Booking", "real": "Real", "estate": "Estate", "medical": "Medical",
    "health": "Health", "education": "Education", "course": "Course",
    "finance": "Finance", "banking": "Banking", "crypto": "Crypto", "nft": "NFT",
    "game": "Game", "gaming": "Gaming", "weather": "Weather", "news": "News",
    "magazine": "Magazine",
}

PROJECT_SUFFIXES = ("Page", "Site", "UI", "Design", "Layout", "Template")
DEFAULT_TITLE = "DSY_Project"


def extract_keywords(prompt: Optional[str]) -> List[str]:
    """Meaningful words, type keywords first, in title case."""
    if not prompt:
        return []

    normalized = re.sub(r"[^a-z0-9\s-]", " ", prompt.lower())
    keywords: List[str] = []
    seen = set()
    for word in normalized.split():
        if len(word) < 3 or word in STOP_WORDS or word in seen:
            continue
        seen.add(word)
        if word in TYPE_KEYWORDS:
            keywords.insert(0, TYPE_KEYWORDS[word])
        else:
            keywords.append(word[0].upper() + word[1:])
    return keywords


def generate_project_title(prompt: Optional[str], rng: Optional[random.Random] = None) -> str:
    keywords = extract_keywords(prompt)
    if not keywords:
        return DEFAULT_TITLE

    words = keywords[:4]
    if len(words) < 2:
        words.append((rng or random).choice(PROJECT_SUFFIXES))
    return "_".join(words)


def sanitize_filename(title: str) -> str:
    cleaned = re.sub(r"[^a-zA-Z0-9_-]", "_", title or "")
    cleaned = re.sub(r"_+", "_", cleaned).strip("_")
    return cleaned[:50]
