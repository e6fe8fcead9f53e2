"""
Example compositions used by the demo and the tests.

`build_simple_composition` is the smallest interesting case:

    Main
      └── [Sub]
              └── Headline (text "Hello")

`build_example_campaign` mirrors a typical promo setup with nesting and a
shared pre-composition:

    Main_Comp
      ├── Background (asset)
      ├── [Sub_Comp_A]
      │       ├── [Sub_Comp_B]
      │       │       ├── Headline (text)
      │       │       ├── Subheadline (text)
      │       │       └── CTA_Button (text)
      │       └── [Logo_Comp]
      └── [Logo_Comp]            <- same container, shared
              └── Logo (asset)
"""
from typing import Callable, Optional

from locrep.memory import InMemoryDocument


def build_simple_composition(resource_exists: Optional[Callable[[str], bool]] = None) -> InMemoryDocument:
    doc = InMemoryDocument(resource_exists=resource_exists)
    main = doc.add_container("Main")
    sub = doc.add_container("Sub")
    doc.add_text(sub, "Headline", "Hello")
    doc.add_reference(main, sub)
    return doc


def build_example_campaign(resource_exists: Optional[Callable[[str], bool]] = None) -> InMemoryDocument:
    doc = InMemoryDocument(resource_exists=resource_exists)
    comps = doc.ensure_folder("Comps")

    main = doc.add_container("Main_Comp", folder=comps)
    sub_a = doc.add_container("Sub_Comp_A", folder=comps)
    sub_b = doc.add_container("Sub_Comp_B", folder=comps)
    logo = doc.add_container("Logo_Comp", folder=comps)

    doc.add_text(sub_b, "Headline", "Welcome")
    doc.add_text(sub_b, "Subheadline", "Trade Now")
    doc.add_text(sub_b, "CTA_Button", "Sign Up")
    doc.add_asset(logo, "Logo", "assets/logo_en.png")

    doc.add_reference(sub_a, sub_b)
    doc.add_reference(sub_a, logo)
    doc.add_asset(main, "Background", "assets/bg_en.png")
    doc.add_reference(main, sub_a)
    doc.add_reference(main, logo)
    return doc


EXAMPLE_MANIFEST = """comp_name,layer_name,type,en-US,zh-TW,ja-JP
Main_Comp,Headline,text,Welcome,歡迎,ようこそ
Main_Comp,Subheadline,text,"Trade Now, Win Big",立即交易,今すぐ取引
Main_Comp,CTA_Button,text,Sign Up,,登録
Main_Comp,Logo,image,assets/logo_en.png,assets/logo_zh.png,assets/logo_ja.png
"""
