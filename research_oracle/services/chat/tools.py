import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from research_oracle.repositories.corpus import CorpusRepository
from research_oracle.repositories.paper import PaperRepository
from research_oracle.schemas.tools import (
    TOOL_NAMES,
    AnalyzeTrendsCall,
    CountPapersCall,
    DatabaseStatsCall,
    FindConnectionsCall,
    FindGapsCall,
    ListTopicsCall,
    RandomExploreCall,
    SearchContentCall,
    SearchPapersCall,
    ToolCall,
    parse_tool_call,
)
from research_oracle.services.embeddings.openai_client import OpenAIEmbeddingsClient

logger = logging.getLogger(__name__)

CHUNK_EXCERPT_CHARS = 200
RANDOM_SUMMARY_CHARS = 150
CONNECTION_TITLE_CHARS = 50
GAP_MIN_PAPERS = 1
GAP_MAX_PAPERS = 5
GAP_REPORT_LIMIT = 10
CONNECTION_SAMPLE_SIZE = 50
CONNECTION_REPORT_LIMIT = 5
OVERVIEW_TOPIC_LIMIT = 10


def _year(value: Optional[int]) -> str:
    return str(value) if value else "?"


def paper_link(paper_id: str, label: str = "Open") -> str:
    return f"[📄 {label}](paper:{paper_id})"


class ToolExecutor:
    """Runs one read-only retrieval tool and returns a text summary.

    Failures never escape: they come back as an ``Error: ...`` string that
    becomes part of the grounding context.
    """

    def __init__(
        self,
        papers: PaperRepository,
        corpus: CorpusRepository,
        embeddings: OpenAIEmbeddingsClient,
        match_threshold: float = 0.1,
    ):
        self.papers = papers
        self.corpus = corpus
        self.embeddings = embeddings
        self.match_threshold = match_threshold

    async def execute_named(self, name: str, args: Optional[Dict[str, Any]] = None) -> str:
        """Run a tool given by name with a loose argument bag."""
        try:
            call = parse_tool_call(name, args)
        except ValidationError as e:
            logger.warning(f"Invalid arguments for tool {name}: {e}")
            return f"Error: invalid arguments for {name}: {e.errors(include_url=False)}"

        if call is None:
            return f"Unknown tool: {name}. Available: {', '.join(TOOL_NAMES)}"

        return await self.execute(call)

    async def execute(self, call: ToolCall) -> str:
        logger.info(f"Executing tool: {call.name}", extra={"tool_args": call.model_dump(exclude={"name"})})

        try:
            match call:
                case SearchPapersCall():
                    return await self._search_papers(call)
                case SearchContentCall():
                    return await self._search_content(call)
                case CountPapersCall():
                    return self._count_papers(call)
                case ListTopicsCall():
                    return self._list_topics(call)
                case AnalyzeTrendsCall():
                    return self._analyze_trends(call)
                case FindGapsCall():
                    return self._find_gaps()
                case RandomExploreCall():
                    return self._random_explore(call)
                case FindConnectionsCall():
                    return self._find_connections()
                case DatabaseStatsCall():
                    return self._database_stats()
                case _:
                    raise TypeError(f"Unsupported tool call: {call!r}")
        except Exception as e:
            logger.error(f"Tool {call.name} failed: {e}")
            return f"Error: {e}"

    async def _search_papers(self, call: SearchPapersCall) -> str:
        if not call.text:
            return "Error: search_papers needs a query or topic"

        embedding = await self.embeddings.embed_query(call.text)
        hits = self.corpus.match_papers(embedding, self.match_threshold, call.limit)
        if not hits:
            return "No papers found matching this query."

        return "\n\n".join(
            f'• **"{hit.title}"** ({_year(hit.pub_year)}) {paper_link(hit.id)}\n'
            f"  {hit.summary or hit.findings or 'No summary'}"
            for hit in hits
        )

    async def _search_content(self, call: SearchContentCall) -> str:
        if not call.query:
            return "Error: search_content needs a query"

        embedding = await self.embeddings.embed_query(call.query)
        hits = self.corpus.match_chunks(embedding, self.match_threshold, call.limit)
        if not hits:
            return "No matching content found in paper texts."

        return "\n\n".join(
            f'From **"{hit.paper_title}"** ({_year(hit.pub_year)}) {paper_link(hit.paper_id)}:\n'
            f'> "{hit.chunk_content[:CHUNK_EXCERPT_CHARS]}..."'
            for hit in hits
        )

    def _count_papers(self, call: CountPapersCall) -> str:
        count = self.papers.count(
            year=call.year,
            year_min=call.year_min,
            year_max=call.year_max,
            entity=call.label,
        )

        description = "Total papers in database"
        if call.year:
            description = f"Papers from {call.year}"
        elif call.year_min or call.year_max:
            description = f"Papers from {call.year_min or '?'} to {call.year_max or 'present'}"
        if call.label:
            description += f' about "{call.label}"'

        return f"{description}: {count}"

    def _list_topics(self, call: ListTopicsCall) -> str:
        topics = self.corpus.get_entity_stats()[: call.limit]
        lines = [
            f"{rank}. {topic.entity} ({topic.paper_count} papers)"
            for rank, topic in enumerate(topics, 1)
        ]
        return f"Top {len(topics)} research topics:\n" + "\n".join(lines)

    def _analyze_trends(self, call: AnalyzeTrendsCall) -> str:
        topic = call.label
        points = self.corpus.analyze_topic_trend(topic)
        if not points:
            return f'No trend data found for "{topic}"'

        lines = [f"{point.year}: {point.paper_count} papers" for point in points]
        return f'Research trend for "{topic}":\n\n' + "\n".join(lines)

    def _find_gaps(self) -> str:
        gaps = self.corpus.find_research_gaps(GAP_MIN_PAPERS, GAP_MAX_PAPERS)
        if not gaps:
            return "No research gaps found."

        lines = [
            f'{rank}. "{gap.entity}" - only {gap.paper_count} paper(s)'
            for rank, gap in enumerate(gaps[:GAP_REPORT_LIMIT], 1)
        ]
        return "Understudied topics:\n\n" + "\n".join(lines)

    def _random_explore(self, call: RandomExploreCall) -> str:
        papers = self.corpus.random_exploration(call.count)
        if not papers:
            return "No papers available."

        entries = []
        for paper in papers:
            summary = paper.summary[:RANDOM_SUMMARY_CHARS] if paper.summary else "No summary"
            entries.append(
                f'• **"{paper.title}"** ({_year(paper.pub_year)}) {paper_link(paper.id)}\n'
                f"  {summary}..."
            )
        return "Random papers:\n\n" + "\n\n".join(entries)

    def _find_connections(self) -> str:
        connections = self.corpus.discover_hidden_connections(CONNECTION_SAMPLE_SIZE)
        if not connections:
            return "No hidden connections found. Try again for different results."

        entries = []
        for rank, pair in enumerate(connections[:CONNECTION_REPORT_LIMIT], 1):
            title_a = (pair.paper_a_title or "")[:CONNECTION_TITLE_CHARS]
            title_b = (pair.paper_b_title or "")[:CONNECTION_TITLE_CHARS]
            entries.append(
                f"{rank}. Topic: **{pair.shared_entity}**\n"
                f"   • {paper_link(pair.paper_a_id, title_a + '...')} ({_year(pair.paper_a_year)})\n"
                f"   • {paper_link(pair.paper_b_id, title_b + '...')} ({_year(pair.paper_b_year)})"
            )
        return "**Connections via shared topics:**\n\n" + "\n\n".join(entries)

    def _database_stats(self) -> str:
        paper_count = self.papers.count()
        chunk_count = self.papers.count_chunks()
        min_year, max_year = self.papers.year_bounds()
        topics = self.corpus.get_entity_stats()
        decades = self.corpus.get_papers_by_decade()

        decade_breakdown = ", ".join(f"{d.decade}s: {d.paper_count}" for d in decades)
        top_topics = "\n".join(
            f"{rank}. {topic.entity} ({topic.paper_count} papers)"
            for rank, topic in enumerate(topics[:OVERVIEW_TOPIC_LIMIT], 1)
        )

        return (
            "## DATABASE OVERVIEW\n\n"
            f"**Total Papers:** {paper_count} research papers\n"
            f"**Text Chunks:** {chunk_count} searchable text segments\n"
            f"**Publication Years:** {min_year or 'unknown'} to {max_year or 'unknown'}\n\n"
            f"**Papers by Decade:** {decade_breakdown or 'N/A'}\n\n"
            f"**Top Research Topics:**\n{top_topics}"
        )
