"""Tests for the extraction heuristics and theme rules."""

import re

import pytest

from problembank.extraction import (
    build_problem_statement,
    build_title,
    calculate_desperate_user_score,
    classify_theme,
    determine_validation_status,
)
from problembank.extraction.heuristics import (
    EMPTY_STATEMENT,
    MAX_TITLE_LENGTH,
    UNTITLED,
    question_text,
    truncate_title,
)
from problembank.models import (
    ContextDiscovery,
    CycleAggregate,
    ImpactAssessment,
    ProblemDiscovery,
    ValueAssessment,
)


class TestBuildTitle:
    def test_refined_statement_wins(self):
        cycle = CycleAggregate(
            id="c1",
            name="Cycle name",
            problem=ProblemDiscovery(
                refined_statement="Refined",
                selected_question="Selected",
                q_takes_too_long="Raw answer",
            ),
        )
        assert build_title(cycle) == "Refined"

    def test_selected_question_before_raw_answers(self):
        cycle = CycleAggregate(
            id="c1",
            problem=ProblemDiscovery(selected_question="Selected", q_repetitive="Raw"),
        )
        assert build_title(cycle) == "Selected"

    def test_first_raw_answer_in_question_order(self):
        cycle = CycleAggregate(
            id="c1",
            problem=ProblemDiscovery(q_complaints="Complaint", q_repetitive="Repetitive"),
        )
        assert build_title(cycle) == "Repetitive"

    def test_blank_answers_are_skipped(self):
        cycle = CycleAggregate(
            id="c1",
            name="Cycle name",
            problem=ProblemDiscovery(refined_statement="   ", selected_question=""),
        )
        assert build_title(cycle) == "Cycle name"

    def test_untitled_when_nothing_available(self):
        assert build_title(CycleAggregate(id="c1")) == UNTITLED

    @pytest.mark.parametrize("length", [199, 200, 201, 5000])
    def test_title_never_exceeds_limit(self, length):
        cycle = CycleAggregate(id="c1", problem=ProblemDiscovery(refined_statement="a" * length))
        title = build_title(cycle)
        assert len(title) <= MAX_TITLE_LENGTH
        if length > MAX_TITLE_LENGTH:
            assert title.endswith("…")

    def test_truncate_leaves_short_titles_alone(self):
        assert truncate_title("short") == "short"


class TestBuildProblemStatement:
    def test_combines_answers_and_context(self):
        statement = build_problem_statement(
            ProblemDiscovery(refined_statement="Refined", q_takes_too_long="Reconciling"),
            ContextDiscovery(
                problem_description="Described",
                who_affected="teachers",
                when_occurs="every morning",
            ),
        )
        assert statement == (
            "Refined\n\n"
            "What takes too long:\nReconciling\n\n"
            "Described\n\n"
            "Affects teachers every morning."
        )

    def test_duplicate_answers_appear_once(self):
        statement = build_problem_statement(
            ProblemDiscovery(refined_statement="Same text", selected_question="Same text", q_repetitive="Same text"),
            None,
        )
        assert statement == "Same text"

    def test_who_without_when_is_dropped(self):
        statement = build_problem_statement(None, ContextDiscovery(who_affected="farmers"))
        assert statement == EMPTY_STATEMENT

    def test_empty_inputs(self):
        assert build_problem_statement(None, None) == EMPTY_STATEMENT


class TestValidationStatus:
    def test_market_validated_needs_users(self):
        impact = ImpactAssessment(completed=True, total_users=12)
        assert determine_validation_status(None, impact) == "market_validated"

    def test_completed_impact_without_users_falls_through(self):
        impact = ImpactAssessment(completed=True, total_users=0)
        value = ValueAssessment(interviews_completed=3)
        assert determine_validation_status(value, impact) == "user_tested"

    def test_desperate_user_confirmed_beats_interviews(self):
        value = ValueAssessment(desperate_user_confirmed=True, interviews_completed=5)
        assert determine_validation_status(value, None) == "desperate_user_confirmed"

    def test_unvalidated_without_records(self):
        assert determine_validation_status(None, None) == "unvalidated"

    def test_null_counts_are_unvalidated(self):
        value = ValueAssessment(interviews_completed=None)
        assert determine_validation_status(value, None) == "unvalidated"


class TestDesperateUserScore:
    def test_none_without_assessment(self):
        assert calculate_desperate_user_score(None) is None

    def test_none_when_no_criteria_met(self):
        value = ValueAssessment(multiple_have_it=False, complained_before=None)
        assert calculate_desperate_user_score(value) is None

    def test_counts_met_criteria(self):
        value = ValueAssessment(
            multiple_have_it=True,
            complained_before=True,
            doing_something=False,
            light_up_at_solution=True,
        )
        assert calculate_desperate_user_score(value) == 3

    def test_all_criteria(self):
        value = ValueAssessment(
            multiple_have_it=True,
            complained_before=True,
            doing_something=True,
            light_up_at_solution=True,
            ask_when_can_use=True,
        )
        assert calculate_desperate_user_score(value) == 5


class TestQuestionText:
    def test_selected_question_and_refined_statement_both_used(self):
        problem = ProblemDiscovery(selected_question="Selected", refined_statement="Refined")
        assert question_text(problem) == "Selected Refined"

    def test_identical_question_and_statement_appear_once(self):
        problem = ProblemDiscovery(selected_question="Same", refined_statement="Same")
        assert question_text(problem) == "Same"

    def test_refined_statement_alone(self):
        problem = ProblemDiscovery(refined_statement="Refined", q_would_pay="Pay")
        assert question_text(problem) == "Refined"

    def test_falls_back_to_first_answer(self):
        assert question_text(ProblemDiscovery(q_would_pay="Pay")) == "Pay"

    def test_none_without_problem(self):
        assert question_text(None) is None


class TestClassifyTheme:
    @pytest.mark.parametrize(
        "text,theme",
        [
            ("Patients queue for hours at the clinic", "healthcare"),
            ("Students miss course deadlines", "education"),
            ("Farmers lose crops to pests", "agriculture"),
            ("Plastic waste piles up near the river", "environment"),
            ("Village welfare schemes go unclaimed", "community"),
            ("Takes too long to reconcile attendance", "platform"),
            ("Nothing recognisable here", "other"),
        ],
    )
    def test_rules(self, text, theme):
        assert classify_theme(text) == theme

    def test_first_matching_rule_wins(self):
        # Mentions both a student and a hospital; healthcare is checked first
        assert classify_theme("Student nurses cannot book hospital shifts") == "healthcare"

    def test_case_insensitive(self):
        assert classify_theme("HOSPITAL BEDS") == "healthcare"

    def test_custom_rules(self):
        rules = [(re.compile(r"bus|train"), "transport")]
        assert classify_theme("The bus is late", rules) == "transport"
        assert classify_theme("The car is late", rules) == "other"
