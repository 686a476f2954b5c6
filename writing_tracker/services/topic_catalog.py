"""Catalog of writing topics students progress through."""

from typing import Optional

from pydantic import BaseModel


class Topic(BaseModel):
    id: str
    title: str
    description: str = ""


TOPICS: list[Topic] = [
    Topic(
        id="landscape-description",
        title="وصف منظر طبيعي",
        description="تعلم كيفية وصف المناظر الطبيعية بأسلوب أدبي مؤثر.",
    ),
    Topic(
        id="discussing-issue",
        title="مناقشة قضية",
        description="تعلم كيفية تحليل القضايا المختلفة، وبناء الحجج، وتقديم رأيك بوضوح وموضوعية.",
    ),
    Topic(
        id="report-writing",
        title="كيفية كتابة التقرير",
        description="اكتشف العناصر الأساسية للتقرير الناجح وكيفية تنظيمه وعرض المعلومات فيه بفعالية.",
    ),
    Topic(
        id="free-expression",
        title="التعبير الحر",
        description="أطلق العنان لإبداعك وتعلم كيفية التعبير عن أفكارك ومشاعرك بحرية وبدون قيود.",
    ),
    Topic(
        id="dialogue-text",
        title="النص الحواري",
        description="تعلم فن كتابة الحوارات الجذابة والواقعية التي تعكس الشخصيات وتدفع الأحداث.",
    ),
]

TOPIC_IDS: frozenset[str] = frozenset(t.id for t in TOPICS)


def get_topic(topic_id: str, catalog: Optional[list[Topic]] = None) -> Optional[Topic]:
    for topic in catalog if catalog is not None else TOPICS:
        if topic.id == topic_id:
            return topic
    return None


def find_topic_id_by_title(title: Optional[str], catalog: Optional[list[Topic]] = None) -> Optional[str]:
    """Exact title match; None when the title is empty or unknown."""
    if not title:
        return None
    for topic in catalog if catalog is not None else TOPICS:
        if topic.title == title:
            return topic.id
    return None
