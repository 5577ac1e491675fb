import streamlit as st

from pdfjpg.controller import ConversionController, ShellState, UploadedFile
from pdfjpg.errors import ConversionInProgressError, InvalidUploadError

COLUMNS = 3

st.set_page_config(page_title="PDF → JPG Converter", layout="wide")

if "ctl" not in st.session_state:
    st.session_state.ctl = ConversionController()
    st.session_state.converted_id = None
    st.session_state.uploader_key = 0
ctl: ConversionController = st.session_state.ctl

# a rerun that finds a run still loading means the previous script run was interrupted
ctl.abandon()

st.title("📄 PDF → JPG Converter")
st.caption("Client-side · Fast · Secure")

# no type filter: the controller decides what is a PDF and says so
file = st.file_uploader("Drag & drop PDF here or browse", key=f"upload_{st.session_state.uploader_key}")

if file is not None and file.file_id != st.session_state.converted_id:
    st.session_state.converted_id = file.file_id
    try:
        with st.spinner("Converting PDF..."):
            progress = st.progress(0.0)
            try:
                ctl.run(UploadedFile.from_streamlit(file),
                        on_page=lambda n, total: progress.progress(n / total, text=f"Page {n} of {total}"))
            finally:
                progress.empty()
    except (InvalidUploadError, ConversionInProgressError) as e:
        st.warning(str(e))

if ctl.state is ShellState.ERROR:
    st.error(ctl.error)
    if st.button("Start over"):
        ctl.reset()
        # new key empties the uploader so the same file is not converted again
        st.session_state.uploader_key += 1
        st.rerun()

if ctl.images:
    st.success(f"Converted {len(ctl.images)} pages")
    cols = st.columns(COLUMNS)
    for i, img in enumerate(ctl.images):
        with cols[i % COLUMNS]:
            with st.container(border=True):
                data = img.jpeg_bytes
                st.image(data, caption=f"Page {img.page_number}", width="stretch")
                st.download_button(f"Download Page {img.page_number}", data=data,
                                   file_name=img.filename, mime="image/jpeg",
                                   key=f"dl_{ctl.generation}_{img.page_number}")
