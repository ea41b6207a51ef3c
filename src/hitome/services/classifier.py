"""
Rule-based classifier for inbox items.

Assigns tags, a one-line summary, an intent label, a suggested reply and an
initial status to an incoming LINE message or Google review. Everything here
is substring matching against fixed word lists; there is no model behind it.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence
import logging

from ..models.thread import ChannelType, ThreadStatus

logger = logging.getLogger(__name__)


DANGER_WORDS: Sequence[str] = (
    "食中毒", "警察", "訴える", "弁護士", "薬", "副作用",
    "返金", "炎上", "個人情報", "訴訟", "クレーム", "詐欺",
    "被害", "通報", "騙された", "最悪", "二度と行かない",
)

# Ratings at or below this value never get an automatic reply.
LOW_RATING_THRESHOLD = 3

SUMMARY_MAX_CHARS = 50

DEFAULT_STORE_NAME = "当店"

# (tag, keywords) in the order tags are reported
TAG_RULES = (
    ("reservation", ("予約", "予定")),
    ("location", ("場所", "住所", "アクセス")),
    ("hours", ("営業時間", "何時", "いつ")),
    ("parking", ("駐車", "パーキング")),
    ("menu", ("メニュー", "料金", "価格")),
    ("question", ("質問", "教えて", "知りたい")),
)

LINE_SUMMARY_RULES = (
    (("予約",), "予約の問い合わせ。日時・人数の確認が必要"),
    (("営業時間",), "営業時間についての質問"),
    (("場所", "住所"), "店舗の場所・アクセスについての質問"),
    (("駐車",), "駐車場についての問い合わせ"),
    (("メニュー", "料金"), "料金・メニューについての質問"),
)
LINE_SUMMARY_DEFAULT = "一般的な問い合わせ。内容確認が必要"
DANGER_SUMMARY = "クレーム疑い。慎重な対応が必要です。"

LINE_INTENT_RULES = (
    ("予約", "予約希望"),
    ("営業時間", "営業時間の質問"),
    ("場所", "場所の質問"),
    ("駐車", "駐車場の質問"),
)
LINE_INTENT_DEFAULT = "一般質問"
DANGER_INTENT = "クレーム疑い"

# Short replies for a LINE channel that has no store profile attached
WEBHOOK_REPLY_RULES = (
    (("予約",), "ご予約ありがとうございます。ご希望の日時、人数、メニューを教えてください。"),
    (("営業時間",), "お問い合わせありがとうございます。営業時間は09:00〜21:00です。"),
    (("場所", "住所"), "店舗の場所はプロフィール欄をご確認ください。"),
    (("駐車場",), "駐車場についてはお気軽にお問い合わせください。"),
)
WEBHOOK_REPLY_DEFAULT = "お問い合わせありがとうございます。詳しい内容を教えてください。"


@dataclass
class StoreProfile:
    """The parts of a store's settings that reply templates depend on."""
    name: str = DEFAULT_STORE_NAME
    tone: str = "polite"
    hours_start: str = "09:00"
    hours_end: str = "21:00"

    @classmethod
    def from_store(cls, store) -> "StoreProfile":
        tone = store.tone.value if hasattr(store.tone, "value") else store.tone
        return cls(
            name=store.name or DEFAULT_STORE_NAME,
            tone=tone or "polite",
            hours_start=store.business_hours_start or "09:00",
            hours_end=store.business_hours_end or "21:00",
        )

    @property
    def hours(self) -> str:
        return f"{self.hours_start}〜{self.hours_end}"


@dataclass
class Classification:
    """Everything the classifier derives from one piece of customer text."""
    tags: List[str] = field(default_factory=list)
    summary: str = ""
    intent: str = ""
    reply: str = ""
    has_danger_word: bool = False
    status: ThreadStatus = ThreadStatus.UNHANDLED


def _contains_any(text: str, words: Iterable[str]) -> bool:
    return any(word and word in text for word in words)


def _is_low_rating(rating: Optional[int]) -> bool:
    return bool(rating) and rating <= LOW_RATING_THRESHOLD


def has_danger_words(text: str, extra_words: Iterable[str] = ()) -> bool:
    """Check the built-in danger words and any store/global additions."""
    return _contains_any(text, DANGER_WORDS) or _contains_any(text, extra_words)


def extract_tags(
    text: str,
    channel: ChannelType,
    rating: Optional[int] = None,
    extra_words: Iterable[str] = (),
) -> List[str]:
    tags = [tag for tag, keywords in TAG_RULES if _contains_any(text, keywords)]

    if channel == ChannelType.GOOGLE and _is_low_rating(rating):
        tags.append("low_rating")
    if has_danger_words(text, extra_words):
        tags.append("danger")

    return tags or ["question"]


def generate_summary(
    text: str,
    channel: ChannelType,
    extra_words: Iterable[str] = (),
) -> str:
    if has_danger_words(text, extra_words):
        return DANGER_SUMMARY

    if channel == ChannelType.GOOGLE:
        if len(text) > SUMMARY_MAX_CHARS:
            return text[:SUMMARY_MAX_CHARS] + "..."
        return text

    for keywords, summary in LINE_SUMMARY_RULES:
        if _contains_any(text, keywords):
            return summary
    return LINE_SUMMARY_DEFAULT


def generate_intent(
    text: str,
    channel: ChannelType,
    rating: Optional[int] = None,
    extra_words: Iterable[str] = (),
) -> str:
    if has_danger_words(text, extra_words):
        return DANGER_INTENT

    if channel == ChannelType.GOOGLE:
        if rating and rating <= 2:
            return "低評価"
        if rating == 3:
            return "中評価"
        return "高評価"

    for keyword, intent in LINE_INTENT_RULES:
        if keyword in text:
            return intent
    return LINE_INTENT_DEFAULT


def _by_tone(tone: str, polite: str, casual: str, standard: str) -> str:
    if tone == "polite":
        return polite
    if tone == "casual":
        return casual
    return standard


def generate_reply(
    text: str,
    channel: ChannelType,
    profile: Optional[StoreProfile] = None,
    rating: Optional[int] = None,
    extra_words: Iterable[str] = (),
) -> str:
    """
    Build the suggested reply for a message or review.

    Returns an empty string when the item must be answered by a person:
    a danger word is present, a review has no rating, or the rating is
    LOW_RATING_THRESHOLD or below. An empty reply is never sent automatically.
    """
    if has_danger_words(text, extra_words):
        return ""

    profile = profile or StoreProfile()
    name = profile.name
    tone = profile.tone

    if channel == ChannelType.GOOGLE:
        if not rating or _is_low_rating(rating):
            return ""
        return _by_tone(
            tone,
            polite=(
                f"この度は{name}をご利用いただき誠にありがとうございます。"
                "お客様からの温かいお言葉を励みに、今後もより良いサービスをご提供できるよう"
                "努めてまいります。またのご来店を心よりお待ち申し上げております。"
            ),
            casual=(
                f"{name}をご利用いただきありがとうございます！"
                "嬉しいお言葉をいただき、スタッフ一同大変励みになります。またぜひお待ちしています！"
            ),
            standard=(
                f"{name}をご利用いただきありがとうございます。"
                "高評価をいただき大変嬉しく思います。またのご来店をお待ちしております。"
            ),
        )

    if "予約" in text:
        return _by_tone(
            tone,
            polite="ご予約のお問い合わせありがとうございます。ご希望の日時、お人数、ご希望のメニューをお教えいただけますでしょうか。",
            casual="ご予約ありがとうございます！希望の日時・人数・メニューを教えてください😊",
            standard="ご予約ありがとうございます。希望の日時、人数、メニューを教えてください。",
        )

    if "営業時間" in text:
        hours = profile.hours
        return _by_tone(
            tone,
            polite=f"お問い合わせありがとうございます。営業時間は{hours}でございます。何かご不明な点がございましたらお気軽にお尋ねください。",
            casual=f"営業時間は{hours}です！お待ちしています😊",
            standard=f"営業時間は{hours}です。よろしくお願いいたします。",
        )

    if "場所" in text or "住所" in text:
        return _by_tone(
            tone,
            polite="お問い合わせありがとうございます。店舗の住所・アクセス情報はプロフィールをご確認ください。ご不明な点がございましたらお気軽にお尋ねください。",
            casual="場所はプロフィール欄に載せています！わからないことがあれば聞いてくださいね😊",
            standard="店舗の場所はプロフィール欄をご確認ください。不明点があればお知らせください。",
        )

    return _by_tone(
        tone,
        polite="お問い合わせいただきありがとうございます。詳しい内容をお伺いしてもよろしいでしょうか。",
        casual="お問い合わせありがとうございます！もう少し詳しく教えてもらえますか？😊",
        standard="お問い合わせありがとうございます。詳しい内容を教えてください。",
    )


def generate_webhook_reply(text: str, extra_words: Iterable[str] = ()) -> str:
    """Fixed-template reply for a LINE channel with no store profile."""
    if has_danger_words(text, extra_words):
        return ""

    for keywords, reply in WEBHOOK_REPLY_RULES:
        if _contains_any(text, keywords):
            return reply
    return WEBHOOK_REPLY_DEFAULT


def determine_initial_status(
    channel: ChannelType,
    text: str,
    rating: Optional[int] = None,
    extra_words: Iterable[str] = (),
) -> ThreadStatus:
    if has_danger_words(text, extra_words):
        return ThreadStatus.REVIEW
    if channel == ChannelType.GOOGLE and _is_low_rating(rating):
        return ThreadStatus.REVIEW
    return ThreadStatus.UNHANDLED


def classify(
    text: str,
    channel: ChannelType,
    profile: Optional[StoreProfile] = None,
    rating: Optional[int] = None,
    extra_words: Iterable[str] = (),
) -> Classification:
    """
    Run every rule over one piece of customer text.

    When ``profile`` is None the LINE reply uses the short fixed templates.
    """
    extra_words = tuple(extra_words)

    if profile is None and channel == ChannelType.LINE:
        reply = generate_webhook_reply(text, extra_words)
    else:
        reply = generate_reply(text, channel, profile, rating, extra_words)

    result = Classification(
        tags=extract_tags(text, channel, rating, extra_words),
        summary=generate_summary(text, channel, extra_words),
        intent=generate_intent(text, channel, rating, extra_words),
        reply=reply,
        has_danger_word=has_danger_words(text, extra_words),
        status=determine_initial_status(channel, text, rating, extra_words),
    )
    logger.debug(
        f"Classified {channel.value} text: tags={result.tags}, "
        f"status={result.status.value}, danger={result.has_danger_word}"
    )
    return result
