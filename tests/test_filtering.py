"""
Filtering and sorting of STIX collections and data component labels.

Covers:
  - Deprecated and revoked objects never survive, with or without a query
  - Empty query sorts by name (hierarchy sort uses the parent's name)
  - Name sorting ignores case and accents, in any locale
  - Non-empty query keeps input order, honours enabled fields, dedups IDs
  - Missing attributes are non-matches
  - Label filtering and sorting
"""

from navigator_search.schemas import Group, SearchField, Technique, default_search_fields
from navigator_search.services import collation_key, filter_and_sort, filter_and_sort_labels

from factories import build_sample_domain, names, technique

FIELDS = default_search_fields()


def universe():
    domain = build_sample_domain()
    return domain.techniques + domain.subtechniques


# ============================================================================
# 1. Status filtering
# ============================================================================

class TestStatusFiltering:
    def test_empty_query_drops_deprecated_and_revoked(self):
        results = filter_and_sort(universe(), "", fields=FIELDS, sort_hierarchy=True)
        assert "Legacy Phishing" not in names(results)
        assert "Revoked Phishing" not in names(results)

    def test_query_drops_deprecated_and_revoked(self):
        results = filter_and_sort(universe(), "phishing", fields=FIELDS, sort_hierarchy=True)
        assert all(not t.deprecated and not t.revoked for t in results)
        assert "Legacy Phishing" not in names(results)


# ============================================================================
# 2. Sorting on empty query
# ============================================================================

class TestSorting:
    def test_names_sorted_case_insensitively(self):
        groups = [
            Group(id="g1", name="beta"),
            Group(id="g2", name="Alpha"),
            Group(id="g3", name="gamma"),
        ]
        assert names(filter_and_sort(groups, "", fields=FIELDS)) == ["Alpha", "beta", "gamma"]

    def test_whitespace_query_counts_as_empty(self):
        groups = [Group(id="g1", name="b"), Group(id="g2", name="a")]
        assert names(filter_and_sort(groups, "   ", fields=FIELDS)) == ["a", "b"]

    def test_subtechniques_sort_under_parent_name(self):
        zeta = technique("zeta", "Zeta")
        beta = technique("beta", "Beta")
        sub = technique("zeta-sub", "Aardvark Sub")
        zeta.add_subtechnique(sub)

        results = filter_and_sort([zeta, beta, sub], "", fields=FIELDS, sort_hierarchy=True)
        assert names(results) == ["Beta", "Zeta", "Aardvark Sub"]

    def test_hierarchy_sort_of_sample_domain(self):
        results = filter_and_sort(universe(), "", fields=FIELDS, sort_hierarchy=True)
        assert names(results) == [
            "Command and Scripting Interpreter",
            "PowerShell",
            "Drive-by Compromise",
            "Phishing",
            "Spearphishing Attachment",
            "Spearphishing Link",
        ]

    def test_input_is_not_mutated(self):
        groups = [Group(id="g1", name="b"), Group(id="g2", name="a")]
        filter_and_sort(groups, "", fields=FIELDS)
        assert names(groups) == ["b", "a"]

    def test_hierarchy_sort_ignores_case(self):
        zebra = technique("z", "Zebra")
        apple = technique("a", "apple")
        zebra.add_subtechnique(technique("z-sub", "Stripes"))

        results = filter_and_sort([zebra, *zebra.subtechniques, apple], "", fields=FIELDS, sort_hierarchy=True)
        assert names(results) == ["apple", "Zebra", "Stripes"]

    def test_accented_names_sort_with_their_base_letter(self):
        groups = [Group(id="g1", name="Zeta"), Group(id="g2", name="Élan"), Group(id="g3", name="eagle")]
        assert names(filter_and_sort(groups, "", fields=FIELDS)) == ["eagle", "Élan", "Zeta"]

    def test_collation_key_breaks_ties_on_raw_text(self):
        assert collation_key("Élan") != collation_key("elan")
        assert sorted(["élan", "Elan"], key=collation_key) == ["Elan", "élan"]


# ============================================================================
# 3. Query filtering
# ============================================================================

class TestQueryFiltering:
    def test_name_match(self):
        items = [
            Technique(id="1", name="Phish"),
            Technique(id="2", name="Spear"),
        ]
        fields = [SearchField(label="name", field="name")]
        results = filter_and_sort(items, "ph", fields=fields, sort_hierarchy=True)
        assert [t.id for t in results] == ["1"]

    def test_query_is_trimmed_and_case_insensitive(self):
        results = filter_and_sort(universe(), "  PHISHING  ", fields=FIELDS)
        assert "Phishing" in names(results)

    def test_results_keep_input_order(self):
        items = [technique("z", "Zeta phish"), technique("a", "Alpha phish")]
        results = filter_and_sort(items, "phish", fields=FIELDS)
        assert names(results) == ["Zeta phish", "Alpha phish"]

    def test_duplicate_ids_are_kept_once(self):
        phishing = technique("phishing", "Phishing")
        same_in_other_tactic = technique("phishing", "Phishing")
        results = filter_and_sort([phishing, same_in_other_tactic], "phish", fields=FIELDS)
        assert len(results) == 1

    def test_matches_attack_id(self):
        results = filter_and_sort(universe(), "t1059.001", fields=FIELDS)
        assert names(results) == ["PowerShell"]

    def test_matches_data_sources(self):
        results = filter_and_sort(universe(), "process creation", fields=FIELDS)
        assert names(results) == ["Command and Scripting Interpreter"]

    def test_disabled_fields_are_ignored(self):
        fields = default_search_fields()
        for field in fields:
            if field.field == "description":
                field.enabled = False
        results = filter_and_sort(universe(), "messages", fields=fields)
        assert results == []

    def test_missing_attribute_is_not_a_match(self):
        fields = [SearchField(label="aliases", field="no_such_attribute")]
        assert filter_and_sort(universe(), "phish", fields=fields) == []

    def test_non_text_attribute_is_not_a_match(self):
        fields = [SearchField(label="sub", field="is_subtechnique")]
        assert filter_and_sort(universe(), "true", fields=fields) == []

    def test_filtering_is_idempotent(self):
        once = filter_and_sort(universe(), "spear", fields=FIELDS)
        twice = filter_and_sort(once, "spear", fields=FIELDS)
        assert [t.id for t in twice] == [t.id for t in once]
        assert names(once) == ["Spearphishing Attachment", "Spearphishing Link"]


# ============================================================================
# 4. Labels
# ============================================================================

class TestLabels:
    LABELS = ["Process: Process Creation", "Network Traffic: Network Traffic Content", "File: File Access"]

    def test_empty_query_sorts(self):
        assert filter_and_sort_labels(self.LABELS, "") == [
            "File: File Access",
            "Network Traffic: Network Traffic Content",
            "Process: Process Creation",
        ]

    def test_empty_query_sort_ignores_case(self):
        assert filter_and_sort_labels(["process: Creation", "File: Access"], "") == [
            "File: Access", "process: Creation"
        ]

    def test_query_filters_in_input_order(self):
        assert filter_and_sort_labels(self.LABELS, " C") == [
            "Process: Process Creation",
            "Network Traffic: Network Traffic Content",
            "File: File Access",
        ]
        assert filter_and_sort_labels(self.LABELS, "traffic") == ["Network Traffic: Network Traffic Content"]

    def test_input_is_not_mutated(self):
        labels = list(self.LABELS)
        filter_and_sort_labels(labels, "")
        assert labels == self.LABELS
