from __future__ import annotations

import json
import urllib.error
import unittest
from unittest.mock import MagicMock, patch

from discussion_redirector.models import CandidatePost
from discussion_redirector.reddit_client import RedditClient, SearchFetchError


def fake_response(body: str) -> MagicMock:
    response = MagicMock()
    response.status = 200
    response.read.return_value = body.encode("utf-8")
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    return response


def listing(*children: object) -> str:
    return json.dumps({"kind": "Listing", "data": {"children": list(children)}})


class ParsePostTests(unittest.TestCase):
    def setUp(self) -> None:
        self.client = RedditClient(user_agent="test-agent")

    def test_builds_candidate_from_child(self) -> None:
        post = self.client.parse_post(
            {
                "kind": "t3",
                "data": {
                    "permalink": "/r/television/comments/abc/show_s01e03/",
                    "title": " Show - S01E03 Episode Discussion ",
                    "subreddit": "television",
                    "score": 412,
                },
            }
        )

        self.assertEqual(
            post,
            CandidatePost(
                url="https://www.reddit.com/r/television/comments/abc/show_s01e03/",
                title="Show - S01E03 Episode Discussion",
                subreddit="television",
                upvotes=412.0,
            ),
        )

    def test_missing_fields_get_defaults(self) -> None:
        post = self.client.parse_post({"data": {"permalink": "/r/x/comments/1/", "score": "lots"}})

        self.assertIsNotNone(post)
        self.assertEqual(post.title, "")
        self.assertEqual(post.subreddit, "")
        self.assertEqual(post.upvotes, 0.0)

    def test_undecodable_children_are_skipped(self) -> None:
        for child in [None, "t3", {}, {"data": []}, {"data": {"title": "no permalink"}}]:
            with self.subTest(child=child):
                self.assertIsNone(self.client.parse_post(child))


class SearchTests(unittest.TestCase):
    def setUp(self) -> None:
        self.client = RedditClient(user_agent="test-agent", timeout_seconds=5)

    def test_search_returns_decoded_posts_and_skips_bad_items(self) -> None:
        body = listing(
            {"data": {"permalink": "/r/anime/comments/1/", "title": "A", "subreddit": "anime", "score": 5}},
            {"data": "broken"},
            {"data": {"permalink": "/r/tv/comments/2/", "title": "B", "subreddit": "tv", "score": -3}},
        )
        with patch("urllib.request.urlopen", return_value=fake_response(body)) as urlopen_mock:
            posts = self.client.search("https://www.reddit.com/search.json?q=x")

        self.assertEqual([post.title for post in posts], ["A", "B"])
        self.assertEqual(posts[1].upvotes, -3.0)
        request = urlopen_mock.call_args.args[0]
        self.assertEqual(request.get_header("User-agent"), "test-agent")
        self.assertEqual(urlopen_mock.call_args.kwargs["timeout"], 5)

    def test_oversized_score_does_not_drop_other_items(self) -> None:
        body = listing(
            {"data": {"permalink": "/r/tv/comments/1/", "title": "A", "subreddit": "tv", "score": int("9" * 400)}},
            {"data": {"permalink": "/r/tv/comments/2/", "title": "B", "subreddit": "tv", "score": 7}},
        )
        with patch("urllib.request.urlopen", return_value=fake_response(body)):
            posts = self.client.search("https://www.reddit.com/search.json?q=x")

        self.assertEqual([post.title for post in posts], ["A", "B"])
        self.assertEqual(posts[0].upvotes, 0.0)
        self.assertEqual(posts[1].upvotes, 7.0)

    def test_item_that_fails_to_decode_is_skipped(self) -> None:
        body = listing({"data": {}}, {"data": {}})
        decoded = CandidatePost(url="https://www.reddit.com/r/tv/comments/2/", title="B", subreddit="tv", upvotes=1.0)
        with patch("urllib.request.urlopen", return_value=fake_response(body)):
            with patch.object(self.client, "parse_post", side_effect=[OverflowError("too big"), decoded]):
                posts = self.client.search("https://www.reddit.com/search.json?q=x")

        self.assertEqual(posts, [decoded])

    def test_search_tolerates_unexpected_payload_shapes(self) -> None:
        for body in ["[]", "{}", '{"data": {"children": null}}', '{"data": "x"}']:
            with self.subTest(body=body):
                with patch("urllib.request.urlopen", return_value=fake_response(body)):
                    self.assertEqual(self.client.search("https://www.reddit.com/search.json"), [])

    def test_network_failure_raises_search_fetch_error(self) -> None:
        with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("offline")) as urlopen_mock:
            with self.assertRaises(SearchFetchError):
                self.client.search("https://www.reddit.com/search.json?q=x")

        self.assertEqual(urlopen_mock.call_count, 1)

    def test_invalid_json_raises_search_fetch_error(self) -> None:
        with patch("urllib.request.urlopen", return_value=fake_response("<html>rate limited</html>")):
            with self.assertRaises(SearchFetchError):
                self.client.search("https://www.reddit.com/search.json?q=x")

    def test_retries_when_configured(self) -> None:
        client = RedditClient(user_agent="test-agent", max_retries=2)
        responses = [urllib.error.URLError("flaky"), fake_response(listing())]
        with patch("urllib.request.urlopen", side_effect=responses) as urlopen_mock:
            with patch("discussion_redirector.reddit_client.time.sleep") as sleep_mock:
                posts = client.search("https://www.reddit.com/search.json?q=x")

        self.assertEqual(posts, [])
        self.assertEqual(urlopen_mock.call_count, 2)
        sleep_mock.assert_called_once_with(1.5)


if __name__ == "__main__":
    unittest.main()
