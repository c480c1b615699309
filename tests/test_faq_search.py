"""
Tests for the chatbot search engine.
"""

import pytest
from unittest.mock import Mock

from core.exceptions import FaqValidationError, StorageUnavailableError
from core.faq_search import MAX_RESULTS, FaqSearchEngine, coerce_category
from core.schemas import FaqCategory, SearchResult


def add_faq(service, school, category="general_info", question="Question?", answer="Answer.", **extra):
    data = {
        "school_id": school.id,
        "category": category,
        "question": question,
        "answer": answer,
    }
    data.update(extra)
    return service.create_faq(data, created_by=1)


class TestSearch:
    """Test suite for FaqSearchEngine.search."""

    def test_admission_scenario(self, engine, admissions_faq):
        result = engine.search("acme.edu", "admission requirements")

        assert isinstance(result, SearchResult)
        assert [f.id for f in result.faqs] == [admissions_faq.id]
        assert FaqCategory.ADMISSIONS in result.suggested_categories
        assert result.total_results == 1

    def test_unknown_domain(self, engine, admissions_faq):
        result = engine.search("unknown.edu", "anything")

        assert result.faqs == []
        assert result.suggested_categories == []
        assert result.total_results == 0

    def test_non_matching_query_still_suggests_categories(self, engine, admissions_faq):
        result = engine.search("acme.edu", "parking permits")

        assert result.faqs == []
        assert result.total_results == 0
        assert result.suggested_categories == [FaqCategory.ADMISSIONS]

    def test_short_query_falls_back_to_filters(self, engine, service, acme, admissions_faq):
        other = add_faq(service, acme, category="campus_life", question="Where is the gym?")

        result = engine.search("acme.edu", "to be or")

        assert [f.id for f in result.faqs] == [other.id, admissions_faq.id]

    def test_empty_query_with_category(self, engine, service, acme, admissions_faq):
        add_faq(service, acme, category="campus_life", question="Where is the gym?")

        result = engine.search("acme.edu", "", category="admissions")

        assert [f.id for f in result.faqs] == [admissions_faq.id]
        assert result.suggested_categories == [
            FaqCategory.ADMISSIONS,
            FaqCategory.CAMPUS_LIFE,
        ]

    def test_category_filter_does_not_narrow_suggestions(self, engine, service, acme, admissions_faq):
        add_faq(service, acme, category="campus_life", question="Admission day events?")

        result = engine.search("acme.edu", "admission", category=FaqCategory.CAMPUS_LIFE)

        assert len(result.faqs) == 1
        assert result.faqs[0].category == FaqCategory.CAMPUS_LIFE
        assert set(result.suggested_categories) == {
            FaqCategory.ADMISSIONS,
            FaqCategory.CAMPUS_LIFE,
        }

    def test_any_term_matches(self, engine, service, acme):
        dining = add_faq(service, acme, question="Dining hours?", answer="Until 9pm.")
        parking = add_faq(service, acme, question="Parking permits?", answer="At the office.")
        add_faq(service, acme, question="Library hours?", answer="Always open.")

        result = engine.search("acme.edu", "dining parking")

        assert {f.id for f in result.faqs} == {dining.id, parking.id}

    def test_newest_first(self, engine, service, acme):
        first = add_faq(service, acme, question="Tuition deadline one?")
        second = add_faq(service, acme, question="Tuition deadline two?")

        result = engine.search("acme.edu", "tuition")

        assert [f.id for f in result.faqs] == [second.id, first.id]

    def test_excludes_inactive_faq(self, engine, service, acme, admissions_faq):
        service.update_faq({"id": admissions_faq.id, "is_active": False})

        result = engine.search("acme.edu", "admission")

        assert result.faqs == []
        assert result.suggested_categories == []

    def test_excludes_inactive_school(self, engine, store, acme, admissions_faq):
        store.set_school_active(acme.id, False)

        result = engine.search("acme.edu", "admission")

        assert result.faqs == []
        assert result.suggested_categories == []
        assert result.total_results == 0

    def test_scoped_to_tenant(self, engine, service, store, acme, admissions_faq):
        other = store.add_school("other.edu")
        add_faq(service, other, category="campus_life", question="Admission tours?")

        result = engine.search("acme.edu", "admission")

        assert all(f.school_id == acme.id for f in result.faqs)
        assert result.suggested_categories == [FaqCategory.ADMISSIONS]

    def test_results_capped(self, engine, service, acme):
        for i in range(MAX_RESULTS + 5):
            add_faq(service, acme, question=f"Scholarship question {i}?")

        result = engine.search("acme.edu", "scholarship")

        assert MAX_RESULTS == 20
        assert len(result.faqs) == MAX_RESULTS
        assert result.total_results == MAX_RESULTS
        assert result.faqs[0].question == f"Scholarship question {MAX_RESULTS + 4}?"

    def test_unknown_category_rejected(self, engine):
        with pytest.raises(FaqValidationError, match="Unknown category"):
            engine.search("acme.edu", "admission", category="sports")

    def test_storage_failure_propagates(self):
        store = Mock()
        store.query_faqs.side_effect = StorageUnavailableError("Database error: down")
        engine = FaqSearchEngine(store)

        with pytest.raises(StorageUnavailableError):
            engine.search("acme.edu", "admission")

    def test_suggestion_failure_fails_whole_search(self):
        store = Mock()
        store.query_faqs.return_value = []
        store.distinct_categories.side_effect = StorageUnavailableError("down")
        engine = FaqSearchEngine(store)

        with pytest.raises(StorageUnavailableError):
            engine.search("acme.edu", "admission")

    def test_store_calls(self):
        store = Mock()
        store.query_faqs.return_value = []
        store.distinct_categories.return_value = []
        engine = FaqSearchEngine(store)

        engine.search("acme.edu", "Campus Dining", category="campus_life")

        predicate = store.query_faqs.call_args.args[0]
        assert predicate.terms == ("campus", "dining")
        assert predicate.category == FaqCategory.CAMPUS_LIFE
        assert store.query_faqs.call_args.kwargs == {"limit": MAX_RESULTS}

        suggestion_predicate = store.distinct_categories.call_args.args[0]
        assert suggestion_predicate.terms == ()
        assert suggestion_predicate.category is None


class TestAvailableCategories:
    """Test suite for FaqSearchEngine.available_categories."""

    def test_two_categories_once_each(self, engine, service, acme):
        add_faq(service, acme, category="admissions", question="Same?", answer="Same.")
        add_faq(service, acme, category="campus_life", question="Same?", answer="Same.")
        add_faq(service, acme, category="campus_life", question="Again?", answer="Again.")

        categories = engine.available_categories("acme.edu")

        assert categories == [FaqCategory.ADMISSIONS, FaqCategory.CAMPUS_LIFE]

    def test_declaration_order(self, engine, service, acme):
        add_faq(service, acme, category="general_info")
        add_faq(service, acme, category="academic_programs")
        add_faq(service, acme, category="contact_support")

        assert engine.available_categories("acme.edu") == [
            FaqCategory.ACADEMIC_PROGRAMS,
            FaqCategory.CONTACT_SUPPORT,
            FaqCategory.GENERAL_INFO,
        ]

    def test_ignores_inactive_faqs(self, engine, service, acme):
        add_faq(service, acme, category="admissions")
        hidden = add_faq(service, acme, category="campus_life")
        service.update_faq({"id": hidden.id, "is_active": False})

        assert engine.available_categories("acme.edu") == [FaqCategory.ADMISSIONS]

    def test_unknown_domain(self, engine):
        assert engine.available_categories("unknown.edu") == []

    def test_inactive_school(self, engine, service, store, acme):
        add_faq(service, acme)
        store.set_school_active(acme.id, False)

        assert engine.available_categories("acme.edu") == []

    def test_school_without_faqs(self, engine, acme):
        assert engine.available_categories("acme.edu") == []


class TestFaqsByCategory:
    def test_lists_active_faqs_in_category(self, engine, service, acme, admissions_faq):
        newer = add_faq(service, acme, category="admissions", question="Transfer credits?")
        add_faq(service, acme, category="campus_life")
        hidden = add_faq(service, acme, category="admissions")
        service.update_faq({"id": hidden.id, "is_active": False})

        faqs = engine.faqs_by_category("acme.edu", "admissions")

        assert [f.id for f in faqs] == [newer.id, admissions_faq.id]

    def test_not_capped(self, engine, service, acme):
        for _ in range(MAX_RESULTS + 3):
            add_faq(service, acme, category="general_info")

        assert len(engine.faqs_by_category("acme.edu", FaqCategory.GENERAL_INFO)) == MAX_RESULTS + 3

    def test_unknown_category(self, engine):
        with pytest.raises(FaqValidationError):
            engine.faqs_by_category("acme.edu", "sports")


class TestDomainNormalization:
    """Every entry point resolves a padded domain to the same tenant."""

    def test_search(self, engine, admissions_faq):
        result = engine.search("  acme.edu\t", "admission")

        assert [f.id for f in result.faqs] == [admissions_faq.id]
        assert result.suggested_categories == [FaqCategory.ADMISSIONS]

    def test_available_categories(self, engine, admissions_faq):
        assert engine.available_categories(" acme.edu ") == [FaqCategory.ADMISSIONS]

    def test_faqs_by_category(self, engine, admissions_faq):
        faqs = engine.faqs_by_category("acme.edu  ", "admissions")

        assert [f.id for f in faqs] == [admissions_faq.id]

    def test_case_is_preserved(self, engine, admissions_faq):
        assert engine.available_categories("ACME.EDU") == []


class TestCoerceCategory:
    @pytest.mark.parametrize("value", [None, FaqCategory.ADMISSIONS])
    def test_passthrough(self, value):
        assert coerce_category(value) is value

    def test_from_string(self):
        assert coerce_category("general_info") is FaqCategory.GENERAL_INFO
