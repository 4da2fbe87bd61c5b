# src/search/kanji_variants.py
# Responsibility: Shinjitai -> kyujitai kanji substitution used to widen CJK searches.

from types import MappingProxyType
from typing import List, Mapping, Optional

from src.search.text_normalizer import normalize_text

# Listings are often written with traditional (kyujitai) forms while users type
# the modern simplified (shinjitai) ones. Characters common in smith names.
KANJI_VARIANTS: Mapping[str, str] = MappingProxyType({
    '国': '國',  # kuni
    '広': '廣',  # hiro
    '竜': '龍',  # ryu / tatsu
    '沢': '澤',  # sawa
    '辺': '邊',  # be / hen
    '桜': '櫻',  # sakura
    '円': '圓',  # en
    '剣': '劍',  # ken
    '鉄': '鐵',  # tetsu
    '真': '眞',  # shin / ma
    '斎': '齋',  # sai
    '関': '關',  # seki / kan
    '万': '萬',  # man
    '芸': '藝',  # gei
    '学': '學',  # gaku
    '栄': '榮',  # ei
    '応': '應',  # o
    '仏': '佛',  # butsu
    '変': '變',  # hen
    '弁': '辯',  # ben
    '宝': '寶',  # ho / takara
    '実': '實',  # jitsu / mi
    '写': '寫',  # sha
    '当': '當',  # to
    '帰': '歸',  # ki
    '旧': '舊',  # kyu
    '権': '權',  # ken / gon
    '歳': '歲',  # sai
    '浜': '濱',  # hama
    '画': '畫',  # ga
    '県': '縣',  # ken
    '経': '經',  # kei / kyo
    '継': '繼',  # tsugu
    '総': '總',  # so
    '聴': '聽',  # cho
    '脳': '腦',  # no
    '蔵': '藏',  # kura
    '覚': '覺',  # kaku
    '観': '觀',  # kan
    '訳': '譯',  # yaku
    '読': '讀',  # doku
    '豊': '豐',  # yutaka
    '辞': '辭',  # ji
    '転': '轉',  # ten
    '遅': '遲',  # chi
    '鋭': '銳',  # ei
    '闘': '鬪',  # to
    '駅': '驛',  # eki
    '験': '驗',  # ken
    '黒': '黑',  # kuro
})

_TRANSLATION_TABLE = str.maketrans(dict(KANJI_VARIANTS))


def has_kanji_variants(text: Optional[str], variants: Mapping[str, str] = KANJI_VARIANTS) -> bool:
    """Checks whether any character of the text has a traditional form."""
    if not text:
        return False
    return any(ch in variants for ch in text)


def to_traditional(text: Optional[str], variants: Mapping[str, str] = KANJI_VARIANTS) -> str:
    """
    Replaces every mapped simplified kanji with its traditional form.
    Characters without a mapping are left untouched.

    Example:
        to_traditional('国広') -> '國廣'
    """
    if not text:
        return ""
    if variants is KANJI_VARIANTS:
        return text.translate(_TRANSLATION_TABLE)
    return ''.join(variants.get(ch, ch) for ch in text)


def get_search_variants(text: Optional[str], variants: Mapping[str, str] = KANJI_VARIANTS) -> List[str]:
    """
    Builds the ordered, deduplicated set of forms to search for a CJK query.

    Args:
        text (str): Raw or normalized query.
        variants (Mapping): Simplified -> traditional table.

    Returns:
        List[str]: [normalized] or [normalized, traditional].
    """
    normalized = normalize_text(text)
    if not normalized:
        return []

    forms = [normalized]
    if has_kanji_variants(normalized, variants):
        traditional = to_traditional(normalized, variants)
        if traditional not in forms:
            forms.append(traditional)
    return forms
