"""Technology topic gate backed by a Bedrock model."""

from .bedrock import BedrockTextModel
from .logging_config import create_execution_logger

CLASSIFIER_PROMPT = """You are a strict gate for technology news only. Input is title and summary. Return exactly one token: TECH or NOT_TECH.
TECH = software, hardware, AI/ML, chips, security, cloud, dev tools, web/mobile, VR/AR, enterprise IT, open-source, consumer gadgets, telecom, data infra, robotics when product/industry focused.
NOT_TECH = general science/medicine/climate/astronomy/biology/space research unless tied to a shipping tech product/platform.
Title: {title}
Summary: {summary}
Answer:"""


class TopicClassifier:
    """Labels candidates as technology news or not."""

    def __init__(
        self,
        model: BedrockTextModel,
        fail_open: bool = True,
        execution_id: str | None = None,
    ):
        """Initialize the classifier.

        Args:
            model: Text model the prompt is sent to
            fail_open: Value returned when the model call fails
            execution_id: Execution ID for logging context
        """
        self.model = model
        self.fail_open = fail_open
        self.logger = create_execution_logger("classifier", execution_id)

    def build_prompt(self, title: str, summary: str) -> str:
        return CLASSIFIER_PROMPT.format(title=title, summary=summary)

    def classify(self, title: str, summary: str) -> bool:
        """Return True if the item is technology news.

        Any answer not starting with TECH counts as a rejection, including
        an empty one. Service errors return ``fail_open``.
        """
        try:
            answer = self.model.complete(
                self.build_prompt(title, summary), allow_empty=True
            )
        except Exception as e:
            self.logger.warning(
                f"Classifier call failed, returning {self.fail_open}: {e}",
                item_title=title,
                error=str(e),
            )
            return self.fail_open

        is_tech = answer.strip().upper().startswith("TECH")
        self.logger.info(
            "Classified candidate",
            item_title=title,
            answer=answer[:20],
            is_tech=is_tech,
        )
        return is_tech
