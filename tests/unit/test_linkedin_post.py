"""Unit tests for LinkedIn hashtag and post generation."""

from loomero.certificates.linkedin import BASE_HASHTAGS, badge_hashtag, generate_hashtags, generate_post


class TestBadgeHashtag:
    def test_known_keywords(self):
        assert badge_hashtag("Team Leader") == "#Leadership"
        assert badge_hashtag("Innovation Star") == "#Innovation"
        assert badge_hashtag("Collaboration Champion") == "#Teamwork"
        assert badge_hashtag("Problem Solver") == "#ProblemSolving"

    def test_unknown_badge_is_camel_joined(self):
        assert badge_hashtag("First Milestone") == "#FirstMilestone"


class TestGenerateHashtags:
    def test_base_tags_first(self):
        tags = generate_hashtags("Something Else")
        assert tags == list(BASE_HASHTAGS)

    def test_title_keywords(self):
        tags = generate_hashtags("React web app with Python API")
        assert tags[:2] == list(BASE_HASHTAGS)
        assert "#React" in tags
        assert "#WebDevelopment" in tags
        assert "#AppDevelopment" in tags
        assert "#Python" in tags
        assert "#API" in tags

    def test_keywords_match_whole_words_only(self):
        assert "#AppDevelopment" not in generate_hashtags("Applied research")

    def test_deduplicates_keeping_first(self):
        tags = generate_hashtags("data data pipeline", ["Innovation Star", "Innovation Award"])
        assert tags.count("#DataScience") == 1
        assert tags.count("#Innovation") == 1
        assert tags.index("#DataScience") < tags.index("#Innovation")


class TestGeneratePost:
    def test_includes_title_badges_mentor_and_certificate(self):
        post, hashtags = generate_post(
            "Cloud Dashboard",
            ["Team Leader"],
            certificate_id="CERT-1-ABCDEF",
            mentor_name="Max Mentor",
        )
        assert '"Cloud Dashboard"' in post
        assert "Achievements unlocked" in post
        assert "• Team Leader" in post
        assert "Special thanks to Max Mentor" in post
        assert "Certificate ID: CERT-1-ABCDEF" in post
        assert " ".join(hashtags) in post
        assert "#CloudComputing" in hashtags
        assert post.rstrip().endswith("#Grateful")

    def test_optional_sections_omitted(self):
        post, _ = generate_post("Cloud Dashboard")
        assert "Achievements unlocked" not in post
        assert "Special thanks" not in post
        assert "Certificate ID" not in post
