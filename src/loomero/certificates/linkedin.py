"""LinkedIn post generation for completed internships."""

from __future__ import annotations

from collections.abc import Iterable

BASE_HASHTAGS = ("#TechInternship", "#SoftwareDevelopment")

TECH_KEYWORDS: dict[str, str] = {
    "web": "#WebDevelopment",
    "mobile": "#MobileDevelopment",
    "app": "#AppDevelopment",
    "api": "#API",
    "database": "#Database",
    "ai": "#ArtificialIntelligence",
    "machine": "#MachineLearning",
    "data": "#DataScience",
    "react": "#React",
    "javascript": "#JavaScript",
    "python": "#Python",
    "node": "#NodeJS",
    "cloud": "#CloudComputing",
    "aws": "#AWS",
    "docker": "#Docker",
    "ui": "#UIDesign",
    "ux": "#UXDesign",
}

# Checked in order; the first fragment found in the badge name wins
BADGE_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("leader", "#Leadership"),
    ("innovation", "#Innovation"),
    ("collaboration", "#Teamwork"),
    ("problem", "#ProblemSolving"),
)

CLOSING_HASHTAGS = (
    "#Internship #ProfessionalGrowth #LoomeroFlow #Learning #Achievement "
    "#Career #Development #Tech #Innovation #Grateful"
)


def badge_hashtag(name: str) -> str:
    lowered = name.lower()
    for fragment, tag in BADGE_KEYWORDS:
        if fragment in lowered:
            return tag
    return "#" + "".join(name.split())


def generate_hashtags(project_title: str, badge_names: Iterable[str] = ()) -> list[str]:
    """Base tags, then one tag per known keyword in the title, then badge tags.

    Duplicates are dropped, keeping first occurrence.
    """
    tags = list(BASE_HASHTAGS)
    tags.extend(TECH_KEYWORDS[word] for word in project_title.lower().split(" ") if word in TECH_KEYWORDS)
    tags.extend(badge_hashtag(name) for name in badge_names)
    return list(dict.fromkeys(tags))


def generate_post(
    project_title: str,
    badge_names: Iterable[str] = (),
    certificate_id: str | None = None,
    mentor_name: str | None = None,
) -> tuple[str, list[str]]:
    """Build the post text. Returns (post, hashtags)."""
    badge_names = list(badge_names)
    hashtags = generate_hashtags(project_title, badge_names)

    achievements = ""
    if badge_names:
        achievements = "\n\n\U0001f3c6 Achievements unlocked:\n" + "\n".join(f"• {n}" for n in badge_names)
    mentor_credit = (
        f"\n\nSpecial thanks to {mentor_name} for the excellent mentorship! \U0001f64f" if mentor_name else ""
    )
    certificate_note = f"\n\n\U0001f4dc Certificate ID: {certificate_id}" if certificate_id else ""

    post = (
        f"\U0001f389 Exciting milestone achieved! I've successfully completed my internship project "
        f'"{project_title}" at LoomeroFlow! \n\n'
        "This journey has been incredibly rewarding, filled with learning opportunities, challenges "
        "that pushed my boundaries, and moments of breakthrough that made it all worthwhile."
        f"{achievements}{mentor_credit}\n\n"
        "\U0001f4a1 Key takeaways:\n"
        "• Enhanced technical skills and problem-solving abilities\n"
        "• Gained hands-on experience in real-world project development\n"
        "• Developed stronger collaboration and communication skills\n"
        f"• Built lasting professional relationships{certificate_note}\n\n"
        "Grateful for this opportunity and excited about applying these skills in future endeavors! "
        "\U0001f680\n\n"
        f"{' '.join(hashtags)}\n\n"
        f"{CLOSING_HASHTAGS}"
    )
    return post, hashtags
