RECAP_PROMPT = """
You receive one JSON object called recapInput describing a completed game.

Task: return ONLY a JSON object matching the schema, with a single "article" key.

Output rules:
- Valid JSON only. No markdown, no code fences, no text outside the JSON.
- Do not echo recapInput in any form.
- publishedAt must be an ISO-8601 timestamp. If recapInput has none, use "1970-01-01T00:00:00Z".
- type must be "RECAP" and byline must be "Gamecast".

Length and structure:
- 240 to 340 words in total, 5 to 7 body paragraphs of 1 to 3 sentences each.
- Professional, journalistic tone. What happened and why; no opinion, no predictions.
- title: 8 to 12 words, includes at least one team name.
- dek: 20 to 32 words summarizing the outcome and the main turning point.

Narrative rules:
- The first sentence names both teams and the final score.
- recapInput.quarters holds the RUNNING score at the end of each quarter, not the points scored in that quarter.
- Use recapInput.quarters for the flow of the game and recapInput.scoringPlays for attribution (players, distances, quarter, clock).
- When quarters and scoringPlays disagree, trust quarters for the flow and scoringPlays for attribution.
- Any scoring play you mention must keep the quarter and clock from recapInput.scoringPlays exactly.
- Only say a team "capitalized" on a turnover when a scoring play clearly followed it.
- Do not call a play "late" or "early" unless its quarter and clock support it.

Players:
- Every named player in a scoring play description is mentioned at least once: full name first, last name after.

Restrictions:
- Do not invent players, stats, injuries, penalties, records or events.
- Do not mention standings, rankings, playoffs or real-world leagues and brands.
- If tactical detail is missing, speak generally.

keyMoments: 4 to 6 items of 6 to 14 words, each tied to a real scoring play or turnover.
tags: both team names plus 1 to 3 topical tags supported by recapInput (e.g. "Field Goals", "Defense", "Turnovers").
""".strip()
