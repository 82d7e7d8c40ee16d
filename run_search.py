# run_search.py (seed a few resumes, then search them by text and by weighted sections)
import asyncio
import sys
from dotenv import load_dotenv
from supabase_vector_search import (
    Document,
    DocumentSections,
    VectorSearchException,
    WeightedSearchQuery,
    create_vector_search_client,
    setup_logging,
)
from supabase_vector_search.embeddings import build_provider, generate_document_embeddings

load_dotenv()

SAMPLE_RESUMES = [
    DocumentSections(
        main="Senior backend engineer with eight years building Python data services.",
        section_1="Python, PostgreSQL, FastAPI, Kubernetes, pgvector",
        section_2="Led the search platform team at a logistics company; cut query latency by 60%.",
        section_3="BSc Computer Science",
    ),
    DocumentSections(
        main="Frontend developer focused on accessible React interfaces.",
        section_1="TypeScript, React, CSS, Storybook",
        section_2="Built the design system for an online learning platform.",
        section_3="Bootcamp graduate, self-taught in UX research",
    ),
    DocumentSections(
        main="Machine learning engineer working on retrieval and ranking.",
        section_1="Python, PyTorch, embeddings, vector databases",
        section_2="Shipped semantic search for a document archive of ten million pages.",
        section_3="MSc Artificial Intelligence",
    ),
]


def print_results(title, results):
    print(f"\n--- {title} ---")
    if not results:
        print("No matches above the threshold.")
        return
    for rank, result in enumerate(results, start=1):
        print(f"{rank}. [{result.similarity:.3f}] {result.content}")
        sections = [
            ("skills", result.similarity_section_1),
            ("experience", result.similarity_section_2),
            ("education", result.similarity_section_3),
        ]
        detail = ", ".join(f"{name}={score:.3f}" for name, score in sections if score is not None)
        if detail:
            print(f"   {detail}")


async def seed(client):
    existing = await client.count_documents({"source": "run_search"})
    if existing:
        print(f"📚 {existing} sample resumes already stored, skipping seed")
        return

    for index, sections in enumerate(SAMPLE_RESUMES):
        document = await client.insert_document(
            Document(content=sections.main, metadata={"source": "run_search", "sample": index}),
            generate_embeddings=True,
            sections=sections,
        )
        print(f"✅ Stored {document.id}")


async def weighted_search(client, role, skills, experience):
    query = await generate_document_embeddings(
        DocumentSections(main=role, section_1=skills, section_2=experience),
        client.get_embedding_provider(),
    )
    return await client.search_weighted(WeightedSearchQuery(
        query_embedding=query.embedding,
        query_section_1=query.embedding_section_1,
        query_section_2=query.embedding_section_2,
        weight_main=0.2,
        weight_section_1=0.5,
        weight_section_2=0.3,
        weight_section_3=0.0,
        match_threshold=0.3,
        match_count=5,
        filter_metadata={"source": "run_search"},
    ))


async def main():
    setup_logging()
    client = await create_vector_search_client(embedding_provider=build_provider())
    await seed(client)

    results = await client.search_text(
        "engineer experienced with vector search",
        match_threshold=0.3,
        match_count=5,
        filter_metadata={"source": "run_search"},
    )
    print_results("Text search", results)

    results = await weighted_search(
        client,
        role="Python engineer for a search team",
        skills="Python, pgvector, embeddings",
        experience="Built and scaled semantic search in production",
    )
    print_results("Weighted search (skills 0.5, experience 0.3, summary 0.2)", results)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except VectorSearchException as e:
        print(f"Error: {e}")
        sys.exit(1)
