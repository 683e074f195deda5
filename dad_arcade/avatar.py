"""SVG cartoon avatars for cards. Purely decorative."""

from dad_arcade.models import DadProfile

_FACE = """\
<svg width="200" height="200" viewBox="0 0 200 200" xmlns="http://www.w3.org/2000/svg">
  <defs>
    <radialGradient id="faceGradient" cx="50%" cy="40%" r="60%">
      <stop offset="0%" style="stop-color:#FFE4B5"/>
      <stop offset="100%" style="stop-color:#DEB887"/>
    </radialGradient>
  </defs>
  <circle cx="100" cy="100" r="80" fill="url(#faceGradient)" stroke="#8B4513" stroke-width="2"/>
  <circle cx="80" cy="85" r="8" fill="#000"/>
  <circle cx="120" cy="85" r="8" fill="#000"/>
  <circle cx="82" cy="83" r="3" fill="#FFF"/>
  <circle cx="122" cy="83" r="3" fill="#FFF"/>
  <ellipse cx="100" cy="100" rx="4" ry="6" fill="#CD853F"/>
  <path d="M 85 115 Q 100 130 115 115" stroke="#8B4513" stroke-width="3" fill="none" stroke-linecap="round"/>
{features}
{accessories}
</svg>"""

PERSONALITY_FEATURES = {
    "funny": (
        '  <path d="M 75 105 Q 85 110 95 105 Q 105 110 115 105 Q 125 110 135 105" '
        'stroke="#8B4513" stroke-width="4" fill="none"/>\n'
        '  <path d="M 70 75 Q 80 70 90 75" stroke="#8B4513" stroke-width="3" fill="none"/>\n'
        '  <path d="M 110 75 Q 120 70 130 75" stroke="#8B4513" stroke-width="3" fill="none"/>'
    ),
    "serious": (
        '  <rect x="65" y="80" width="30" height="20" fill="none" stroke="#000" stroke-width="2" rx="5"/>\n'
        '  <rect x="105" y="80" width="30" height="20" fill="none" stroke="#000" stroke-width="2" rx="5"/>\n'
        '  <line x1="95" y1="90" x2="105" y2="90" stroke="#000" stroke-width="2"/>\n'
        '  <path d="M 80 130 Q 100 140 120 130" stroke="#8B4513" stroke-width="6" fill="#8B4513"/>'
    ),
    "adventurous": (
        '  <ellipse cx="100" cy="50" rx="60" ry="15" fill="#D2691E"/>\n'
        '  <ellipse cx="100" cy="45" rx="55" ry="20" fill="#8B4513"/>\n'
        '  <circle cx="100" cy="45" r="5" fill="#FFD700"/>'
    ),
    "gentle": (
        '  <circle cx="70" cy="105" r="8" fill="#FFB6C1" opacity="0.6"/>\n'
        '  <circle cx="130" cy="105" r="8" fill="#FFB6C1" opacity="0.6"/>'
    ),
}

# (keywords, svg snippet); first match wins
HOBBY_ACCESSORIES: list[tuple[tuple[str, ...], str]] = [
    (("sport", "football", "baseball", "golf"),
     '  <circle cx="150" cy="60" r="12" fill="#8B4513" stroke="#000" stroke-width="1"/>'),
    (("music", "guitar"),
     '  <path d="M 140 50 L 160 50 L 160 80 L 140 80 Z" fill="#8B4513" stroke="#000"/>'),
    (("cook", "grill", "bbq"),
     '  <rect x="140" y="45" width="20" height="5" fill="#D3D3D3" stroke="#000"/>'),
]


def hobby_accessory(hobby: str) -> str:
    lowered = hobby.lower()
    for keywords, snippet in HOBBY_ACCESSORIES:
        if any(k in lowered for k in keywords):
            return snippet
    return ""


def dad_avatar(profile: DadProfile) -> str:
    """Build a cartoon face whose features follow personality and hobby."""
    return _FACE.format(
        features=PERSONALITY_FEATURES.get(profile.personality, ""),
        accessories=hobby_accessory(profile.favorite_hobby),
    )


def thank_you_avatar() -> str:
    return (
        '<svg width="200" height="200" viewBox="0 0 200 200" xmlns="http://www.w3.org/2000/svg">\n'
        '  <path d="M100 170 C 20 110, 40 40, 100 75 C 160 40, 180 110, 100 170 Z" fill="#E91E63"/>\n'
        '  <text x="100" y="118" font-size="20" text-anchor="middle" fill="#FFF">Thank You</text>\n'
        '  <circle cx="40" cy="40" r="4" fill="#FFD700"/>\n'
        '  <circle cx="165" cy="35" r="3" fill="#FFD700"/>\n'
        '  <circle cx="170" cy="150" r="4" fill="#FFD700"/>\n'
        "</svg>"
    )
