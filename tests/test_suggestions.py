import json

from whisperbox.api.suggestions import SUGGESTION_PROMPT, parse_suggestions

JOINED = "What's your favorite book?||Where would you travel next?||What made you smile today?"


class FakeChunk:
    def __init__(self, content):
        self.content = content


class FakeChatModel:
    def __init__(self, text=JOINED, fail_after=None):
        self.text = text
        self.fail_after = fail_after
        self.prompts = []

    async def astream(self, prompt):
        self.prompts.append(prompt)
        for i, part in enumerate(self.text.split("||")):
            if self.fail_after is not None and i == self.fail_after:
                raise RuntimeError("upstream went away")
            yield FakeChunk(part if i == 0 else "||" + part)

    async def ainvoke(self, prompt):
        self.prompts.append(prompt)
        return FakeChunk(self.text)


def frames(body):
    return [json.loads(line[len("data: "):]) for line in body.splitlines() if line.startswith("data: ")]


def test_streams_suggestions_as_server_sent_events(app, client):
    model = FakeChatModel()
    app.state.suggestion_model = model

    response = client.post("/suggestions")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")

    events = frames(response.text)
    assert all(e["status"] == 200 for e in events)
    assert "".join(e["response"] for e in events) == JOINED
    assert model.prompts == [SUGGESTION_PROMPT]


def test_stream_failure_ends_with_error_event(app, client):
    app.state.suggestion_model = FakeChatModel(fail_after=1)

    events = frames(client.post("/suggestions").text)
    assert events[0]["status"] == 200
    assert events[-1]["status"] == 500


def test_non_streaming_returns_parsed_list(app, client):
    app.state.suggestion_model = FakeChatModel()

    response = client.post("/suggestions", params={"stream": False})
    assert response.json() == {
        "success": True,
        "suggestions": [
            "What's your favorite book?",
            "Where would you travel next?",
            "What made you smile today?",
        ],
    }


def test_unconfigured_suggestions_are_unavailable(app, client):
    app.state.settings.API_KEY = ""
    app.state.suggestion_model = None

    response = client.post("/suggestions")
    assert response.status_code == 503
    assert response.json()["message"] == "Message suggestions are not configured"


def test_parse_suggestions_drops_quotes_and_blanks():
    assert parse_suggestions("'One?|| Two? ||'") == ["One?", "Two?"]
