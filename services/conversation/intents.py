"""Rule-based intent classification for user turns."""

from __future__ import annotations

import re
from enum import Enum
from typing import Callable, Dict, Optional, Pattern, Sequence, Tuple

from models.session_models import Language


class Intent(str, Enum):
	SWITCH_TO_HINDI = "switch_to_hindi"
	SWITCH_TO_ENGLISH = "switch_to_english"
	WASTE_ANALYSIS = "waste_analysis"
	PHOTO_ISSUE = "photo_issue"
	HAZARDOUS_WASTE = "hazardous_waste"
	ORGANIC_WASTE = "organic_waste"
	RECYCLABLE_WASTE = "recyclable_waste"
	GARBAGE = "garbage"
	WATER = "water"
	ROAD = "road"
	CERTIFICATE = "certificate"
	BILL = "bill"
	WASTE_INFO = "waste"
	RECYCLE_INFO = "recycle"
	TAX = "tax"
	PERMIT = "permit"
	UNKNOWN = "unknown"


COMPLAINT_INTENTS = frozenset({Intent.GARBAGE, Intent.WATER, Intent.ROAD})
LANGUAGE_SWITCH_INTENTS = frozenset({Intent.SWITCH_TO_HINDI, Intent.SWITCH_TO_ENGLISH})

HINDI_NAMES = ("hindi", "हिंदी")
ENGLISH_NAMES = ("english", "अंग्रेजी")

WASTE_VOCABULARY = (
	"waste", "trash", "garbage", "recycle", "dispose", "identify",
	"कचरा", "कूड़ा", "रीसायकल", "निपटान", "पहचान",
)

# Keyword table, in precedence order. Hindi mode accepts the English keyword
# and its Hindi counterpart for each entry.
_TABLE_ENTRIES: Tuple[Tuple[Intent, str, Tuple[str, ...]], ...] = (
	(Intent.GARBAGE, "garbage", ("कचरा",)),
	(Intent.WATER, "water", ("पानी",)),
	(Intent.ROAD, "road", ("सड़क",)),
	(Intent.CERTIFICATE, "certificate", ("प्रमाणपत्र",)),
	(Intent.BILL, "bill", ("बिल",)),
	(Intent.WASTE_INFO, "waste", ("अपशिष्ट",)),
	(Intent.RECYCLE_INFO, "recycle", ("पुनर्चक्रण",)),
	(Intent.TAX, "tax", ("संपत्ति कर", "टैक्स")),
	(Intent.PERMIT, "permit", ("परमिट", "अनुमति")),
)

KEYWORD_TABLE: Dict[Language, Tuple[Tuple[str, Intent], ...]] = {
	Language.ENGLISH: tuple((english, intent) for intent, english, _ in _TABLE_ENTRIES),
	Language.HINDI: tuple(
		(keyword, intent)
		for intent, english, hindi in _TABLE_ENTRIES
		for keyword in (english,) + hindi
	),
}

# A keyword followed by a virama is only the first half of a conjunct in a
# longer word, e.g. बिल inside बिल्कुल.
_KEYWORD_PATTERNS: Dict[Language, Tuple[Tuple[Pattern[str], Intent], ...]] = {
	language: tuple((re.compile(re.escape(keyword) + "(?!्)"), intent) for keyword, intent in entries)
	for language, entries in KEYWORD_TABLE.items()
}


def _word_pattern(words: Sequence[str]) -> Pattern[str]:
	return re.compile(r"\b(?:" + "|".join(re.escape(w) for w in words) + r")\b")


class _Detector:
	"""Free-text category detector: English words on word boundaries, Hindi as substrings."""

	def __init__(self, english: Sequence[str], hindi: Sequence[str]) -> None:
		self._english = _word_pattern(english)
		self._hindi = tuple(hindi)

	def matches(self, text: str) -> bool:
		return bool(self._english.search(text)) or any(word in text for word in self._hindi)


_HAZARDOUS = _Detector(
	("battery", "batteries", "chemical", "chemicals", "paint", "medicine", "medicines", "syringe",
	 "syringes", "e-waste", "ewaste", "bulb", "bulbs", "pesticide", "hazardous", "toxic"),
	("बैटरी", "रसायन", "दवा", "दवाई", "सिरिंज", "ई-कचरा", "खतरनाक"),
)
_ORGANIC = _Detector(
	("food", "peel", "peels", "vegetable", "vegetables", "fruit", "fruits", "compost", "composting",
	 "dry leaves", "garden leaves", "fallen leaves", "leftovers", "organic"),
	("जैविक", "खाद", "सब्जी", "फलों", "छिलके", "पत्ते", "बचा हुआ खाना"),
)
_RECYCLABLE = _Detector(
	("plastic", "paper", "cardboard", "glass", "bottle", "bottles", "metal", "newspaper", "newspapers",
	 "carton", "recyclable", "recyclables"),
	("प्लास्टिक", "कागज", "कागज़", "गत्ता", "कांच", "बोतल", "धातु", "अखबार"),
)

Rule = Callable[[str, Language, bool], Optional[Intent]]


def _language_switch(text: str, language: Language, has_attachment: bool) -> Optional[Intent]:
	if any(name in text for name in HINDI_NAMES):
		return Intent.SWITCH_TO_HINDI
	if any(name in text for name in ENGLISH_NAMES):
		return Intent.SWITCH_TO_ENGLISH
	return None


def _waste_photo(text: str, language: Language, has_attachment: bool) -> Optional[Intent]:
	if has_attachment and (not text or any(word in text for word in WASTE_VOCABULARY)):
		return Intent.WASTE_ANALYSIS
	return None


def _issue_photo(text: str, language: Language, has_attachment: bool) -> Optional[Intent]:
	return Intent.PHOTO_ISSUE if has_attachment else None


def match_category(text: str) -> Optional[Intent]:
	"""Return the waste category named in `text`; hazardous wins over organic, then recyclable."""
	if _HAZARDOUS.matches(text):
		return Intent.HAZARDOUS_WASTE
	if _ORGANIC.matches(text):
		return Intent.ORGANIC_WASTE
	if _RECYCLABLE.matches(text):
		return Intent.RECYCLABLE_WASTE
	return None


def _category_detectors(text: str, language: Language, has_attachment: bool) -> Optional[Intent]:
	return match_category(text)


def match_keyword(text: str, language: Language) -> Optional[Intent]:
	"""Return the first keyword-table intent whose keyword occurs in `text`."""
	for pattern, intent in _KEYWORD_PATTERNS[language]:
		if pattern.search(text):
			return intent
	return None


def _keyword_table(text: str, language: Language, has_attachment: bool) -> Optional[Intent]:
	return match_keyword(text, language)


# Evaluated top to bottom; the first rule returning an intent wins.
RULES: Tuple[Tuple[str, Rule], ...] = (
	("language_switch", _language_switch),
	("waste_photo", _waste_photo),
	("issue_photo", _issue_photo),
	("category_detectors", _category_detectors),
	("keyword_table", _keyword_table),
)


def normalize(text: str) -> str:
	return (text or "").strip().lower()


class IntentClassifier:
	"""Map a user turn to an Intent using the ordered RULES."""

	def __init__(self, rules: Sequence[Tuple[str, Rule]] = RULES) -> None:
		self.rules = tuple(rules)

	def classify(self, text: str, language: Language, *, has_attachment: bool = False) -> Intent:
		normalized = normalize(text)
		for _name, rule in self.rules:
			intent = rule(normalized, language, has_attachment)
			if intent is not None:
				return intent
		return Intent.UNKNOWN
