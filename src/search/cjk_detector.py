# src/search/cjk_detector.py
# Responsibility: Detects whether a query contains CJK ideographs (or CJK punctuation).

import re
from typing import Optional

# U+3000-U+9FFF covers CJK punctuation, kana and unified ideographs;
# U+F900-U+FAFF covers compatibility ideographs.
_CJK_RE = re.compile(r'[\u3000-\u9fff\uf900-\ufaff]')


def contains_cjk(text: Optional[str]) -> bool:
    """
    Returns True if any character of the text lies in a CJK range.
    This is a presence test; mixed-script strings such as 'A刀B' count as CJK.
    """
    if not text:
        return False
    return _CJK_RE.search(text) is not None
