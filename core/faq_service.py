"""
FAQ write-side operations for school administrators.

Handles validation, school existence checks and keyword derivation before
delegating persistence to the injected FaqStore.
"""

from typing import Any, Dict, List, Union

from core.exceptions import NotFoundError
from core.keywords import derive_keywords
from core.schemas import CreateFaqInput, Faq, UpdateFaqInput, parse_input
from core.storage_faq import FaqStore
from utils.logger import get_logger

logger = get_logger(__name__)


class FaqService:
    """
    Create, update, delete and list FAQ entries.

    Keyword rules:
    - create: explicit non-empty keywords are stored as given, otherwise
      keywords are derived from question and answer
    - update: explicit keywords (even an empty list) are stored as given;
      otherwise keywords are re-derived only when question or answer changes
    """

    def __init__(self, store: FaqStore):
        self.store = store

    def get_faq(self, faq_id: int) -> Faq:
        """
        Fetch a FAQ by id.

        Raises:
            NotFoundError: If no FAQ has that id
        """
        faq = self.store.get_faq_by_id(faq_id)
        if faq is None:
            raise NotFoundError("FAQ", faq_id)
        return faq

    def list_faqs_for_school(self, school_id: int) -> List[Faq]:
        """All FAQs of a school including inactive ones, newest first."""
        return self.store.list_faqs_for_school(school_id)

    def create_faq(
        self, data: Union[CreateFaqInput, Dict[str, Any]], created_by: int
    ) -> Faq:
        """
        Create a FAQ for an existing school.

        Args:
            data: CreateFaqInput or an equivalent dict
            created_by: ID of the admin user creating the entry

        Returns:
            The stored Faq

        Raises:
            FaqValidationError: If the input is invalid
            NotFoundError: If the school does not exist
            StorageUnavailableError: If the store fails
        """
        faq_input = parse_input(CreateFaqInput, data)

        # Existence check and insert are separate store calls; a school deleted
        # in between leaves an orphan for the admin subsystem to clean up.
        if self.store.find_school_by_id(faq_input.school_id) is None:
            logger.warning(f"FAQ creation rejected: school {faq_input.school_id} not found")
            raise NotFoundError("School", faq_input.school_id)

        if faq_input.keywords:
            keywords = list(faq_input.keywords)
        else:
            keywords = derive_keywords(faq_input.question, faq_input.answer)
            logger.debug(f"Derived {len(keywords)} keywords for new FAQ")

        return self.store.insert_faq(
            {
                "school_id": faq_input.school_id,
                "category": faq_input.category,
                "question": faq_input.question,
                "answer": faq_input.answer,
                "keywords": keywords,
                "is_active": True,
                "created_by": created_by,
            }
        )

    def update_faq(self, data: Union[UpdateFaqInput, Dict[str, Any]]) -> Faq:
        """
        Apply a partial update to a FAQ.

        Args:
            data: UpdateFaqInput or an equivalent dict; omitted fields are kept

        Returns:
            The updated Faq

        Raises:
            FaqValidationError: If the input is invalid
            NotFoundError: If the FAQ does not exist
            StorageUnavailableError: If the store fails
        """
        faq_input = parse_input(UpdateFaqInput, data)
        current = self.get_faq(faq_input.id)

        fields: Dict[str, Any] = {}
        if faq_input.category is not None:
            fields["category"] = faq_input.category
        if faq_input.question is not None:
            fields["question"] = faq_input.question
        if faq_input.answer is not None:
            fields["answer"] = faq_input.answer
        if faq_input.is_active is not None:
            fields["is_active"] = faq_input.is_active

        if faq_input.keywords is not None:
            fields["keywords"] = list(faq_input.keywords)
        elif faq_input.question is not None or faq_input.answer is not None:
            fields["keywords"] = derive_keywords(
                fields.get("question", current.question),
                fields.get("answer", current.answer),
            )
            logger.debug(f"Re-derived {len(fields['keywords'])} keywords for FAQ {current.id}")

        updated = self.store.update_faq(faq_input.id, fields)
        if updated is None:
            raise NotFoundError("FAQ", faq_input.id)
        return updated

    def delete_faq(self, faq_id: int) -> bool:
        """Delete a FAQ. Returns False when no FAQ had that id."""
        return self.store.delete_faq(faq_id)
