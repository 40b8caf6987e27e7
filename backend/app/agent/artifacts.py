from pydantic import BaseModel, Field


class TemasSuggestion(BaseModel):
    """Artifact produced by the theme agents (video and carousel)."""
    temas: list[str] = Field(description="Suggested themes for the topic")


class Cena(BaseModel):
    narracao: str = Field(description="Narration text read aloud for this scene")
    imagem: str = Field(description="Description of the imagery shown during the narration")


class Roteiro(BaseModel):
    """Artifact produced by the Roteiro Agent."""
    roteiro: list[Cena] = Field(description="Ordered scenes of the video script")


class Slide(BaseModel):
    titulo: str = Field(default="", description="Catchy slide title")
    paragrafo: str = Field(default="", description="Explanatory paragraph")
    imagem: str = Field(default="", description="Textual description of the slide picture, never a URL")


class Carrossel(BaseModel):
    """Artifact produced by the Carrossel Agent."""
    carrossel: list[Slide] = Field(description="Ordered carousel slides")


class TemasInput(BaseModel):
    prompt: str
    topico: str
    language: str = "pt-BR"


class RoteiroInput(BaseModel):
    prompt: str
    tema: str
    duracao: int
    language: str = "pt-BR"


class CarrosselInput(BaseModel):
    prompt: str
    tema: str
    quantidade: int
    language: str = "pt-BR"
