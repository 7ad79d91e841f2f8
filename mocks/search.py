"""Canned search answers for demo mode."""

MOCK_SEARCH_RESPONSES = {
    "AI agents": {
        "answer": {
            "text": (
                "AI agents are a major topic, with many experts believing they represent the next step in "
                "user-computer interaction. Discussions often focus on their potential for autonomy and the "
                "economic shifts they could trigger."
            ),
            "citations": [
                {
                    "index": 1,
                    "episode_id": "ep175-allin",
                    "episode_title": "E175: State of the Union, AI agents, commercial real estate doom loop & more",
                    "podcast_name": "All-In Podcast",
                    "timestamp": "21:30",
                    "start_seconds": 1290,
                    "chunk_index": 31,
                },
                {
                    "index": 2,
                    "episode_id": "openai-p2-acq",
                    "episode_title": "OpenAI (Part 2)",
                    "podcast_name": "Acquired",
                    "timestamp": "01:15:45",
                    "start_seconds": 4545,
                    "chunk_index": 112,
                },
            ],
        },
        "results": [],
        "processing_time_ms": 1845,
    },
    "venture capital valuations": {
        "answer": {
            "text": (
                "VC valuations have seen a significant correction from the 2021 peaks, with a renewed focus on "
                "profitability and sustainable growth."
            ),
            "citations": [
                {
                    "index": 1,
                    "episode_id": "ep159-allin",
                    "episode_title": "E159: The state of venture, with guest Mike Maples, Jr. of Floodgate",
                    "podcast_name": "All-In Podcast",
                    "timestamp": "33:05",
                    "start_seconds": 1985,
                    "chunk_index": 55,
                },
            ],
        },
        "results": [],
        "processing_time_ms": 2133,
    },
    "DePIN infrastructure": {
        "answer": {
            "text": (
                "Decentralized Physical Infrastructure Networks (DePIN) are gaining traction as blockchain meets "
                "real-world infrastructure."
            ),
            "citations": [
                {
                    "index": 1,
                    "episode_id": "bankless-depin-232",
                    "episode_title": "The DePIN Revolution: Crypto Meets Infrastructure",
                    "podcast_name": "Bankless",
                    "timestamp": "42:15",
                    "start_seconds": 2535,
                    "chunk_index": 67,
                },
            ],
        },
        "results": [],
        "processing_time_ms": 1567,
    },
}

EMPTY_SEARCH_RESPONSE = {"answer": None, "results": [], "processing_time_ms": 1234}


def mock_search(query: str) -> dict:
    """Return the canned answer whose key overlaps the query, else an empty answer."""
    normalized = query.lower().strip()
    if normalized:
        for key, response in MOCK_SEARCH_RESPONSES.items():
            if key.lower() in normalized or normalized in key.lower():
                return response
    return EMPTY_SEARCH_RESPONSE
