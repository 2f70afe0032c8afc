from scheme_corpus import SchemeCorpus
from scheme_matcher import SchemeIndex, content_tokens, normalize, tokenize


def test_tokenize_drops_punctuation_and_case():
    assert tokenize("PM-KISAN: Income Support!") == ["pm", "kisan", "income", "support"]
    assert tokenize("") == []


def test_tokenize_keeps_devanagari_words_whole():
    assert tokenize("किसान सम्मान निधि") == ["किसान", "सम्मान", "निधि"]


def test_content_tokens_skip_stop_words():
    assert content_tokens("support for the small farmers") == ["support", "small", "farmers"]


def test_normalize_joins_tokens():
    assert normalize("  PM-Kisan  ") == "pm kisan"


def test_income_support_query_matches_pm_kisan(pm_kisan_corpus):
    index = SchemeIndex.build(pm_kisan_corpus)
    candidates = index.search("income support scheme for small farmers")
    assert [candidate.record.name for candidate in candidates] == ["PM-KISAN"]
    assert candidates[0].score >= index.threshold


def test_gibberish_query_matches_nothing(pm_kisan_corpus):
    index = SchemeIndex.build(pm_kisan_corpus)
    assert index.search("xyz totally unrelated gibberish 12345") == []


def test_empty_query_or_corpus_gives_no_candidates(pm_kisan_corpus):
    assert SchemeIndex.build(pm_kisan_corpus).search("") == []
    assert SchemeIndex.build(pm_kisan_corpus).search("   ") == []
    assert SchemeIndex.build(SchemeCorpus()).search("income support") == []


def test_exact_name_scores_maximum(sample_corpus):
    index = SchemeIndex.build(sample_corpus)
    for record in sample_corpus:
        candidates = index.search(record.name)
        assert candidates[0].record == record
        assert candidates[0].score == 100.0


def test_misspelled_name_still_matches(pm_kisan_corpus):
    candidates = SchemeIndex.build(pm_kisan_corpus).search("pm kisaan")
    assert candidates[0].record.name == "PM-KISAN"


def test_crop_insurance_prefers_fasal_bima(sample_corpus):
    candidates = SchemeIndex.build(sample_corpus).search("crop insurance")
    assert candidates[0].record.name == "Pradhan Mantri Fasal Bima Yojana"


def test_ranking_is_ordered_and_stable(sample_corpus):
    index = SchemeIndex.build(sample_corpus)
    first = index.search("farmers")
    second = index.search("farmers")
    assert first == second
    assert len(first) == 3
    scores = [candidate.score for candidate in first]
    assert scores == sorted(scores, reverse=True)


def test_limit_caps_candidates(sample_corpus):
    index = SchemeIndex.build(sample_corpus)
    assert len(index.search("farmers", limit=2)) == 2
    assert index.search("farmers", limit=0) == []


def test_ties_keep_corpus_order(pm_kisan):
    corpus = SchemeCorpus.from_dicts([
        {**pm_kisan, "link": "https://first.example"},
        {**pm_kisan, "link": "https://second.example"},
    ])
    candidates = SchemeIndex.build(corpus).search("income support for farmers")
    assert [candidate.record.link for candidate in candidates] == [
        "https://first.example",
        "https://second.example",
    ]
    assert candidates[0].score == candidates[1].score


def test_higher_threshold_filters_weak_matches(pm_kisan_corpus):
    strict = SchemeIndex.build(pm_kisan_corpus, threshold=99)
    assert strict.search("income support scheme for small farmers") == []
    assert strict.search("PM-KISAN")[0].score == 100.0
